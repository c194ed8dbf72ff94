"""
Pytest configuration and fixtures for Endor tests.
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import Annotated

import pytest
from pydantic import BaseModel, Field

# Add the repository root to path for imports
# This allows `from endor.schema import ...` to work without installing
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from endor.config import EndorSettings  # noqa: E402
from endor.schema import SchemaTag  # noqa: E402
from endor.service import EndorHybridService, ServiceRegistry, SpecializedCategory  # noqa: E402


# =============================================================================
# Models
# =============================================================================


class Customer(BaseModel):
    id: Annotated[str | None, SchemaTag(read_only=True)] = None
    name: str = Field(title="Name")
    created_at: datetime | None = Field(default=None, alias="createdAt")


class BusinessFields(BaseModel):
    vat_number: str = Field(alias="vatNumber")


ADDITIONAL_NOTE_YAML = """
additionalNote:
  type: string
  description: Free-form note
"""


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def customer_model():
    return Customer


@pytest.fixture
def business_fields_model():
    return BusinessFields


@pytest.fixture
def settings():
    """Development settings with text logs."""
    return EndorSettings(
        microservice_id="customers-service",
        environment="development",
        log_type="TEXT",
        log_level="DEBUG",
    )


@pytest.fixture
def customers_hybrid():
    """Customers with one ``cat-1`` category (static vatNumber, dynamic additionalNote)."""
    return EndorHybridService("customers", "Customers", Customer).with_categories(
        SpecializedCategory(
            id="cat-1",
            description="Business customers",
            static_model=BusinessFields,
            additional_attributes=ADDITIONAL_NOTE_YAML,
        )
    )


@pytest.fixture
def registry(settings, customers_hybrid):
    """Registry with the customers hybrid registered on the in-memory backend."""
    registry = ServiceRegistry(settings)
    registry.register(customers_hybrid)
    return registry
