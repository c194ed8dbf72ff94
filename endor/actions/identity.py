"""
Identity providers.

The authorization stage asks an IdentityProvider for the session of the
current request. HttpIdentityProvider calls the authentication service:

    POST {base_url}/api/{app}/v1/authentication/authorize
    Cookie: sessionId=<cookie>
    {"path": "<request path>"}

and reads the session from the ``data`` of the returned envelope. Any
non-2xx answer is an authorization failure; transport and decoding
problems are internal errors.

DevelopmentIdentityProvider returns a fixed session without any call.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable
from uuid import uuid4

import httpx
from pydantic import ValidationError as PydanticValidationError

from endor.errors import AuthorizationError, InternalServerError

from .context import EndorContext, Session

if TYPE_CHECKING:
    from endor.config import EndorSettings

logger = logging.getLogger(__name__)


@runtime_checkable
class IdentityProvider(Protocol):
    async def resolve_session(self, ctx: EndorContext[Any]) -> Session:
        ...


class DevelopmentIdentityProvider:
    """Fixed session for local development."""

    def __init__(self, user: str, email: str):
        self.user = user
        self.email = email

    async def resolve_session(self, ctx: EndorContext[Any]) -> Session:
        return Session(
            id=str(uuid4()),
            user=self.user,
            email=self.email,
            app=ctx.request.app if ctx.request else "",
            development=True,
        )


class HttpIdentityProvider:
    """
    Session resolution through the authentication service.

    Args:
        base_url: Authentication service base URL
        cookie_name: Name of the session cookie
        timeout: Request timeout in seconds
        http_client: Optional shared client; closed by the caller if given
    """

    def __init__(
        self,
        base_url: str,
        *,
        cookie_name: str = "sessionId",
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.cookie_name = cookie_name
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    def authorize_url(self, app: str) -> str:
        return f"{self.base_url}/api/{app}/v1/authentication/authorize"

    async def resolve_session(self, ctx: EndorContext[Any]) -> Session:
        request = ctx.request
        cookie = request.cookies.get(self.cookie_name) if request else None
        if not cookie:
            raise AuthorizationError("Unauthorized: missing session cookie")

        try:
            response = await self._client.post(
                self.authorize_url(request.app),
                json={"path": request.path},
                headers={"Cookie": f"{self.cookie_name}={cookie}"},
            )
        except httpx.HTTPError as e:
            logger.error(f"Identity service call failed: {e}")
            raise InternalServerError(f"Identity service unavailable: {e}") from e

        if not response.is_success:
            logger.info(f"Identity service rejected session: HTTP {response.status_code}")
            raise AuthorizationError("Unauthorized")

        try:
            body = response.json()
            data = body.get("data") if isinstance(body, dict) else None
            if not isinstance(data, dict):
                raise ValueError("response has no session data")
            return Session.model_validate(data)
        except (ValueError, PydanticValidationError) as e:
            logger.error(f"Invalid identity service response: {e}")
            raise InternalServerError(f"Invalid identity service response: {e}") from e

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def create_identity_provider(
    settings: EndorSettings,
    http_client: httpx.AsyncClient | None = None,
) -> DevelopmentIdentityProvider | HttpIdentityProvider:
    """Development provider in the development environment, HTTP otherwise."""
    if settings.is_development:
        logger.info("Using development identity provider")
        return DevelopmentIdentityProvider(settings.development_user, settings.development_email)
    return HttpIdentityProvider(
        settings.identity_service_url,
        cookie_name=settings.session_cookie_name,
        http_client=http_client,
    )
