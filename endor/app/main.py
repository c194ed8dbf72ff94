"""
Endor application factory.

Builds a FastAPI application around a ServiceRegistry. Services must be
registered before the application starts; the lifespan freezes the
registry on startup and drains event handlers on shutdown.

Example:
    settings = get_settings()
    registry = ServiceRegistry(settings)
    registry.register(customers)

    app = create_app(registry)

    if __name__ == "__main__":
        run(app, settings)
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from endor import __version__
from endor.config import EndorSettings
from endor.observability import configure_logging
from endor.service import ServiceRegistry

from .router import create_router

logger = logging.getLogger(__name__)


def create_app(registry: ServiceRegistry, *, configure_logs: bool = True) -> FastAPI:
    """FastAPI application serving ``registry``."""
    settings = registry.settings
    if configure_logs:
        configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {settings.microservice_id} with {len(registry)} services...")
        registry.freeze()

        yield

        logger.info(f"Shutting down {settings.microservice_id}...")
        try:
            await registry.close()
        except Exception as e:
            logger.error(f"Error during shutdown: {e}", exc_info=True)

    app = FastAPI(
        title=settings.microservice_id,
        description=f"{settings.microservice_id} docs",
        version=__version__,
        lifespan=lifespan,
        openapi_url=None,
    )
    app.include_router(create_router(registry))

    @app.get("/", tags=["root"])
    async def root() -> dict[str, Any]:
        """Root endpoint with service info."""
        return {
            "service": settings.microservice_id,
            "version": __version__,
            "resources": [s.resource for s in registry.services],
        }

    @app.get("/health", tags=["root"])
    async def health() -> dict[str, str]:
        return {"status": "healthy"}

    return app


def run(app: FastAPI, settings: EndorSettings) -> None:
    """Serve ``app`` with uvicorn on the configured port."""
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.server_port)
