"""
Hybrid Service Example

This example demonstrates a hybrid resource served over HTTP:
1. Declare a base model and a category with static and dynamic fields
2. Register the hybrid on a service registry
3. Serve every generated action with FastAPI

Run: python -m examples.01-hybrid-service.main

Then:
    curl -X POST localhost:8080/api/acme/v1/customers/business/create \\
        -H 'content-type: application/json' \\
        -d '{"data": {"name": "Ada", "vatNumber": "IT123", "additionalNote": "vip"}}'
    curl localhost:8080/openapi.json
"""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, Field

from endor import EndorHybridService, ServiceRegistry, SpecializedCategory
from endor.app import create_app, run
from endor.config import get_settings
from endor.schema import SchemaTag

# =============================================================================
# Models
# =============================================================================


class Customer(BaseModel):
    id: Annotated[str | None, SchemaTag(read_only=True)] = None
    name: str = Field(title="Name")
    created_at: datetime | None = Field(default=None, alias="createdAt")


class BusinessFields(BaseModel):
    vat_number: str = Field(alias="vatNumber", title="VAT number")


BUSINESS_ATTRIBUTES = """
additionalNote:
  type: string
  description: Free-form note kept with the customer
"""


# =============================================================================
# Application
# =============================================================================


customers = EndorHybridService("customers", "Customers", Customer).with_categories(
    SpecializedCategory(
        id="business",
        description="Business customers",
        static_model=BusinessFields,
        additional_attributes=BUSINESS_ATTRIBUTES,
    )
)

settings = get_settings()
registry = ServiceRegistry(settings)
registry.register(customers)

app = create_app(registry)


if __name__ == "__main__":
    run(app, settings)
