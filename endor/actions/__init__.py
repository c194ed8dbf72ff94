"""
Endor Action & Context Pipeline

Typed actions, the request context, the response envelope and the
executor that runs validation, authorization and the handler.

Example:
    from endor.actions import ActionExecutor, ActionRequest, new_action

    action = new_action(list_customers, "List customers", payload_type=ReadDTO)
    result = await ActionExecutor(identity_provider=provider).execute(
        action,
        ActionRequest(resource="customers", action="list", body={}),
    )
"""

from .action import (
    ActionHandler,
    ActionOptions,
    EndorServiceAction,
    NoPayload,
    new_action,
    new_action_with_events,
    new_configurable_action,
)
from .context import ActionRequest, EndorContext, Session, Stage
from .executor import TRANSITIONS, ActionExecutor
from .identity import (
    DevelopmentIdentityProvider,
    HttpIdentityProvider,
    IdentityProvider,
    create_identity_provider,
)
from .middleware import (
    MICROSERVICE_HEADER,
    ActionResult,
    AuthorizationMiddleware,
    HandlerMiddleware,
    Middleware,
    StageOutcome,
    ValidationMiddleware,
)
from .response import MessageGravity, Response, ResponseBuilder, ResponseMessage

__all__ = [
    # Actions
    "EndorServiceAction",
    "ActionOptions",
    "ActionHandler",
    "NoPayload",
    "new_action",
    "new_configurable_action",
    "new_action_with_events",
    # Context
    "EndorContext",
    "ActionRequest",
    "Session",
    "Stage",
    # Response
    "Response",
    "ResponseBuilder",
    "ResponseMessage",
    "MessageGravity",
    # Pipeline
    "ActionExecutor",
    "ActionResult",
    "Middleware",
    "StageOutcome",
    "ValidationMiddleware",
    "AuthorizationMiddleware",
    "HandlerMiddleware",
    "TRANSITIONS",
    "MICROSERVICE_HEADER",
    # Identity
    "IdentityProvider",
    "HttpIdentityProvider",
    "DevelopmentIdentityProvider",
    "create_identity_provider",
]
