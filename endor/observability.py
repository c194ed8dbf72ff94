"""
Structured logging for Endor.

JSONLogger emits one JSON object per log line through the standard
``logging`` module; TextLogger renders the same fields as ``key=value``
pairs. RequestLogger wraps either with the fields every action log line
carries (execution id, resource, action, session and user).

Example:
    log = RequestLogger.for_request(
        execution_id="abc-123",
        resource="customers",
        action="create",
        log_type=settings.log_type,
    )
    log.request_started()
    log.stage_completed("validation", duration_ms=1.2)
    log.request_completed(status_code=200, duration_ms=12.5)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from endor.config import EndorSettings

logger = logging.getLogger(__name__)


class LogLevel(Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class StructuredLogger(Protocol):
    """Loggers that take key-value context with each message."""

    def debug(self, message: str, **context: Any) -> None:
        ...

    def info(self, message: str, **context: Any) -> None:
        ...

    def warning(self, message: str, **context: Any) -> None:
        ...

    def error(self, message: str, **context: Any) -> None:
        ...

    def with_context(self, **extra: Any) -> StructuredLogger:
        ...


# =============================================================================
# Logger Implementations
# =============================================================================


@dataclass
class JSONLogger:
    """
    Structured logger that outputs JSON-formatted logs.

    Example output:
        {"timestamp": "2026-01-02T10:30:00+00:00", "level": "info",
         "logger": "endor.actions", "message": "Request started",
         "resource": "customers", "action": "create"}
    """

    name: str = "endor"
    extra_context: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(self.name)

    def _record(self, level: LogLevel, message: str, context: dict[str, Any]) -> dict[str, Any]:
        return {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": level.value,
            "logger": self.name,
            "message": message,
            **self.extra_context,
            **context,
        }

    def _render(self, record: dict[str, Any]) -> str:
        return json.dumps(record, default=str)

    def _log(self, level: LogLevel, message: str, context: dict[str, Any]) -> None:
        if not self._logger.isEnabledFor(getattr(logging, level.name)):
            return
        getattr(self._logger, level.value)(self._render(self._record(level, message, context)))

    def debug(self, message: str, **context: Any) -> None:
        self._log(LogLevel.DEBUG, message, context)

    def info(self, message: str, **context: Any) -> None:
        self._log(LogLevel.INFO, message, context)

    def warning(self, message: str, **context: Any) -> None:
        self._log(LogLevel.WARNING, message, context)

    def error(self, message: str, **context: Any) -> None:
        self._log(LogLevel.ERROR, message, context)

    def with_context(self, **extra: Any) -> JSONLogger:
        """Create a new logger with additional context."""
        return type(self)(name=self.name, extra_context={**self.extra_context, **extra})


@dataclass
class TextLogger(JSONLogger):
    """Same fields as JSONLogger, rendered as ``message key=value ...``."""

    def _render(self, record: dict[str, Any]) -> str:
        message = record.pop("message")
        for key in ("timestamp", "level", "logger"):
            record.pop(key, None)
        pairs = " ".join(f"{k}={v}" for k, v in record.items())
        return f"{message} {pairs}" if pairs else message


def create_logger(log_type: str = "JSON", name: str = "endor", **context: Any) -> JSONLogger:
    """Build a JSON or text logger from a ``log_type`` setting."""
    cls = TextLogger if log_type.upper() == "TEXT" else JSONLogger
    return cls(name=name, extra_context=context)


def configure_logging(settings: EndorSettings) -> None:
    """Configure the root logger level and format from settings."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    fmt = "%(message)s" if settings.log_type.upper() == "JSON" else "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    logging.basicConfig(level=level, format=fmt)
    logger.debug(f"Logging configured: level={settings.log_level} type={settings.log_type}")


# =============================================================================
# Request Logger
# =============================================================================


@dataclass
class RequestLogger:
    """Lifecycle logging for one action request."""

    inner: StructuredLogger

    @classmethod
    def for_request(
        cls,
        *,
        execution_id: str,
        resource: str,
        action: str,
        log_type: str = "JSON",
    ) -> RequestLogger:
        return cls(
            inner=create_logger(
                log_type,
                name="endor.actions",
                execution_id=execution_id,
                resource=resource,
                action=action,
            )
        )

    def bind_session(self, session_id: str, user_id: str) -> None:
        self.inner = self.inner.with_context(session_id=session_id, user_id=user_id)

    def request_started(self, **context: Any) -> None:
        self.inner.info("Request started", **context)

    def stage_completed(self, stage: str, duration_ms: float, next_stage: str) -> None:
        self.inner.debug(
            "Stage completed",
            stage=stage,
            next_stage=next_stage,
            duration_ms=round(duration_ms, 2),
        )

    def request_completed(self, status_code: int, duration_ms: float) -> None:
        self.inner.info(
            "Request completed",
            status_code=status_code,
            duration_ms=round(duration_ms, 2),
        )

    def request_audit(self, record: dict[str, Any]) -> None:
        self.inner.debug("Request audit", **record)

    def request_failed(self, status_code: int, messages: list[str], duration_ms: float) -> None:
        log = self.inner.error if status_code >= 500 else self.inner.warning
        log(
            "Request failed",
            status_code=status_code,
            messages=messages,
            duration_ms=round(duration_ms, 2),
        )
