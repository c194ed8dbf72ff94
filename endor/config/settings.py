"""
Endor settings.

Settings are resolved once at process start and passed explicitly to the
registry, repository factory and identity provider. Nothing in the core
reads the environment on its own.

Environment variables (prefix ``ENDOR_``):
    ENDOR_MICROSERVICE_ID, ENDOR_ENVIRONMENT, ENDOR_SERVER_PORT,
    ENDOR_IDENTITY_SERVICE_URL, ENDOR_SESSION_COOKIE_NAME,
    ENDOR_DOCUMENT_DB_URI, ENDOR_DOCUMENT_DB_NAME,
    ENDOR_HYBRID_RESOURCES_ENABLED,
    ENDOR_LOG_TYPE, ENDOR_LOG_LEVEL,
    ENDOR_READ_TIMEOUT_SECONDS, ENDOR_LIST_TIMEOUT_SECONDS
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from functools import lru_cache

from pydantic import BaseModel, Field, SecretStr

ENV_PREFIX = "ENDOR_"

DEVELOPMENT = "development"


class EndorSettings(BaseModel):
    """
    Microservice settings.

    Security:
        The document database URI uses SecretStr so credentials are not
        logged. Read it with ``settings.document_db_uri.get_secret_value()``.
    """

    # Service identity
    microservice_id: str = "endor-service"
    environment: str = DEVELOPMENT
    server_port: int = 8080

    # Identity service
    identity_service_url: str = Field(
        default="http://localhost:8000",
        description="Base URL of the authentication service",
    )
    session_cookie_name: str = "sessionId"
    development_user: str = "659f27cce7fd9277b3cc4ef7"
    development_email: str = "endor@endor.com"

    # Document database
    document_db_uri: SecretStr = SecretStr("mongodb://localhost:27017")
    document_db_name: str = "endor"
    read_timeout_seconds: float = 5.0
    list_timeout_seconds: float = 10.0

    # Features
    hybrid_resources_enabled: bool = True

    # Logging
    log_type: str = Field(default="JSON", description="JSON or TEXT")
    log_level: str = "INFO"

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == DEVELOPMENT


def _flag(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_settings(environ: Mapping[str, str] | None = None) -> EndorSettings:
    """Build settings from ``ENDOR_*`` variables (``os.environ`` by default)."""
    env = os.environ if environ is None else environ
    defaults = EndorSettings()

    def get(name: str, default: str) -> str:
        return env.get(f"{ENV_PREFIX}{name}", default)

    return EndorSettings(
        # Service
        microservice_id=get("MICROSERVICE_ID", defaults.microservice_id),
        environment=get("ENVIRONMENT", defaults.environment),
        server_port=int(get("SERVER_PORT", str(defaults.server_port))),
        # Identity
        identity_service_url=get("IDENTITY_SERVICE_URL", defaults.identity_service_url),
        session_cookie_name=get("SESSION_COOKIE_NAME", defaults.session_cookie_name),
        # Document database
        document_db_uri=get("DOCUMENT_DB_URI", defaults.document_db_uri.get_secret_value()),
        document_db_name=get("DOCUMENT_DB_NAME", defaults.document_db_name),
        read_timeout_seconds=float(get("READ_TIMEOUT_SECONDS", str(defaults.read_timeout_seconds))),
        list_timeout_seconds=float(get("LIST_TIMEOUT_SECONDS", str(defaults.list_timeout_seconds))),
        # Features
        hybrid_resources_enabled=_flag(
            env.get(f"{ENV_PREFIX}HYBRID_RESOURCES_ENABLED"), defaults.hybrid_resources_enabled
        ),
        # Logging
        log_type=get("LOG_TYPE", defaults.log_type),
        log_level=get("LOG_LEVEL", defaults.log_level),
    )


@lru_cache()
def get_settings() -> EndorSettings:
    """
    Settings from the process environment.

    Uses lru_cache for singleton pattern. Only the application entry point
    should call this; library code receives settings as an argument.
    """
    return load_settings()
