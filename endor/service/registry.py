"""
Service registry.

The registry owns every registered service of a microservice together
with the collaborators needed to run their actions: the composer, the
executor (identity provider and event bus) and the OpenAPI assembler.

Registration happens at startup. ``freeze()`` closes the registry before
traffic is accepted; afterwards services and schemas are read-only.

Example:
    registry = ServiceRegistry(settings)
    registry.register(customers_hybrid)
    registry.register(EndorService("health", methods={"ping": ping_action}))
    registry.freeze()

    result = await registry.dispatch(
        ActionRequest(resource="customers", action="list", app="acme", body={})
    )
"""

from __future__ import annotations

import logging
from typing import Any

from endor.actions import (
    ActionExecutor,
    ActionRequest,
    ActionResult,
    EndorServiceAction,
    IdentityProvider,
    create_identity_provider,
)
from endor.config import EndorSettings
from endor.errors import EndorError, NotFoundError, RegistrationError
from endor.events import EventBus, InMemoryEventBus
from endor.openapi import DEFAULT_PATH_PREFIX, build_openapi_document
from endor.repository import RepositoryFactory

from .hybrid import EndorHybridService, HybridComposer
from .service import EndorService

logger = logging.getLogger(__name__)


class ServiceRegistry:
    """
    Registered services of one microservice.

    Args:
        settings: Microservice settings
        composer: Hybrid composer (defaults to one over a factory built from settings)
        event_bus: Bus attached to every request context
        identity_provider: Session resolver (defaults from settings)
    """

    def __init__(
        self,
        settings: EndorSettings | None = None,
        *,
        composer: HybridComposer | None = None,
        event_bus: EventBus | None = None,
        identity_provider: IdentityProvider | None = None,
    ):
        self.settings = settings or EndorSettings()
        self.composer = composer or HybridComposer(RepositoryFactory(self.settings))
        self.event_bus = event_bus if event_bus is not None else InMemoryEventBus()
        self.identity_provider = identity_provider or create_identity_provider(self.settings)
        self.executor = ActionExecutor(
            identity_provider=self.identity_provider,
            event_bus=self.event_bus,
            microservice_id=self.settings.microservice_id,
            log_type=self.settings.log_type,
        )
        self._services: dict[str, EndorService] = {}
        self._frozen = False

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def register(self, service: EndorService | EndorHybridService[Any]) -> EndorService:
        """
        Register a plain or hybrid service.

        Raises:
            RegistrationError: Registry frozen, duplicate resource, or an
                invalid hybrid declaration.
        """
        if self._frozen:
            raise RegistrationError(f"Cannot register '{service.resource}': registry is frozen")
        if service.resource in self._services:
            raise RegistrationError(f"Resource '{service.resource}' is already registered")

        if isinstance(service, EndorHybridService):
            if not self.settings.hybrid_resources_enabled:
                raise RegistrationError(
                    f"Cannot register hybrid resource '{service.resource}': hybrid resources are disabled"
                )
            service = self.composer.compose(service)

        self._services[service.resource] = service
        logger.info(f"Registered service: {service.resource} ({len(service.methods)} actions)")
        return service

    def freeze(self) -> None:
        self._frozen = True
        logger.info(f"Service registry frozen with {len(self._services)} services")

    @property
    def frozen(self) -> bool:
        return self._frozen

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    @property
    def services(self) -> list[EndorService]:
        """Registered services, highest priority first, then by registration order."""
        return sorted(self._services.values(), key=lambda s: -(s.priority or 0))

    def get(self, resource: str) -> EndorService | None:
        return self._services.get(resource)

    def __contains__(self, resource: str) -> bool:
        return resource in self._services

    def __len__(self) -> int:
        return len(self._services)

    def get_action(self, resource: str, action: str, version: str | None = None) -> EndorServiceAction:
        """
        Raises:
            NotFoundError: Unknown resource, version or action.
        """
        service = self._services.get(resource)
        if service is None or (version is not None and service.version != version):
            raise NotFoundError(f"Resource '{resource}' not found")
        return service.get_action(action)

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    async def dispatch(self, request: ActionRequest) -> ActionResult:
        """Run the action named by ``request``."""
        try:
            action = self.get_action(request.resource, request.action, request.version)
        except EndorError as e:
            logger.info(f"Dispatch failed for {request.resource}/{request.action}: {e.message}")
            return ActionResult.from_error(e)

        category_id, _ = EndorService.split_key(request.action)
        ctx = self.executor.create_context(action, request, category_id=category_id)
        return await self.executor.execute(action, request, ctx)

    # -------------------------------------------------------------------------
    # Documentation
    # -------------------------------------------------------------------------

    def openapi(self, host: str = "/", path_prefix: str | None = None) -> dict[str, Any]:
        """OpenAPI document of every registered service."""
        return build_openapi_document(
            self.settings.microservice_id,
            host,
            self.services,
            path_prefix or DEFAULT_PATH_PREFIX,
            cookie_name=self.settings.session_cookie_name,
        )

    def catalog(self) -> list[dict[str, Any]]:
        """Resources with their actions and YAML input schemas."""
        result = []
        for service in self.services:
            actions = {}
            for name in service.action_names:
                action = service.methods[name]
                actions[name] = {
                    "description": action.description,
                    "public": action.options.public,
                    "inputSchema": action.input_schema.to_yaml() if action.input_schema else None,
                    "events": sorted(action.events),
                }
            result.append(
                {
                    "id": service.resource,
                    "description": service.description,
                    "service": self.settings.microservice_id,
                    "categories": service.categories,
                    "actions": actions,
                }
            )
        return result

    async def close(self) -> None:
        """Drain event handlers and release collaborators."""
        drain = getattr(self.event_bus, "drain", None)
        if drain is not None:
            await drain()
        close = getattr(self.identity_provider, "close", None)
        if close is not None:
            await close()
        self.composer.repository_factory.close()
