"""
Endor error taxonomy.

Every error raised by the framework derives from EndorError and carries
the HTTP status code the action pipeline translates it into. Handlers may
raise these directly; the pipeline turns them into a response envelope.

Groups:
- Request errors (ValidationError, AuthorizationError, NotFoundError,
  ConflictError, InternalServerError, RepositoryTimeoutError)
- Event emission errors (EventError and subclasses)
- Registration errors (RegistrationError and subclasses), fatal at startup
"""

from __future__ import annotations

from collections.abc import Iterable


class EndorError(Exception):
    """Base class for framework errors."""

    status_code: int = 500

    def __init__(self, message: str, *, messages: Iterable[str] | None = None):
        super().__init__(message)
        self.message = message
        self.messages: list[str] = list(messages) if messages else [message]


# =============================================================================
# Request Errors
# =============================================================================


class ValidationError(EndorError):
    """Malformed or missing payload fields."""

    status_code = 400


class AuthorizationError(EndorError):
    """Missing or invalid session."""

    status_code = 401


class NotFoundError(EndorError):
    """No record matched the requested identity."""

    status_code = 404


class ConflictError(EndorError):
    """A record with the same identity already exists."""

    status_code = 409


class InternalServerError(EndorError):
    status_code = 500


class RepositoryTimeoutError(EndorError):
    """A repository operation exceeded its deadline."""

    status_code = 504

    def __init__(self, operation: str, timeout: float):
        super().__init__(f"Repository operation '{operation}' timed out after {timeout}s")
        self.operation = operation
        self.timeout = timeout


class PipelineStateError(EndorError):
    """A middleware requested a stage transition the pipeline does not allow."""


# =============================================================================
# Event Errors
# =============================================================================


class EventError(EndorError):
    """Misuse of event emission. Always returned to the handler."""


class UndeclaredEventError(EventError):
    def __init__(self, name: str, available: Iterable[str] = ()):
        available = sorted(available)
        super().__init__(
            f"Event '{name}' is not declared for this action. Available: {available}"
        )
        self.name = name
        self.available = available


class PayloadMismatchError(EventError):
    """Emitted payload does not match the event definition."""


class PayloadTypeMismatchError(PayloadMismatchError):
    def __init__(self, event_name: str, expected: type, actual: type):
        super().__init__(
            f"Payload type mismatch for event '{event_name}': "
            f"expected {expected.__name__}, got {actual.__name__}"
        )
        self.event_name = event_name
        self.expected = expected
        self.actual = actual


class NoEventBusError(EventError):
    def __init__(self, name: str):
        super().__init__(f"Cannot emit event '{name}': no event bus attached to context")
        self.name = name


# =============================================================================
# Registration Errors
# =============================================================================


class RegistrationError(EndorError):
    """Invalid service definition. Fatal at startup."""


class SchemaConflictError(RegistrationError):
    """Two different shapes claim the same schema name."""

    def __init__(self, name: str):
        super().__init__(f"Schema '{name}' is defined twice with different structures")
        self.name = name


class SchemaParseError(RegistrationError):
    """A YAML schema fragment is malformed or uses an unknown type."""


class UnsupportedBackendError(RegistrationError):
    def __init__(self, kind: str, supported: Iterable[str] = ()):
        super().__init__(
            f"Unsupported persistence kind '{kind}'. Supported: {sorted(supported)}"
        )
        self.kind = kind


class ActionCollisionError(RegistrationError):
    def __init__(self, resource: str, action: str):
        super().__init__(f"Action '{action}' is already registered on resource '{resource}'")
        self.resource = resource
        self.action = action


__all__ = [
    "EndorError",
    "ValidationError",
    "AuthorizationError",
    "NotFoundError",
    "ConflictError",
    "InternalServerError",
    "RepositoryTimeoutError",
    "PipelineStateError",
    "EventError",
    "UndeclaredEventError",
    "PayloadMismatchError",
    "PayloadTypeMismatchError",
    "NoEventBusError",
    "RegistrationError",
    "SchemaConflictError",
    "SchemaParseError",
    "UnsupportedBackendError",
    "ActionCollisionError",
]
