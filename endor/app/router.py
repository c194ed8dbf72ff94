"""
FastAPI binding for a service registry.

Every action is reachable as

    POST /api/{app}/{version}/{resource}/{action}

where ``action`` may contain a category prefix (``business/create``). The
JSON body is the action payload; the response is the Endor envelope with
the status code chosen by the pipeline.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from endor.actions import ActionRequest, ActionResult
from endor.errors import ValidationError
from endor.openapi import DEFAULT_PATH_PREFIX
from endor.service import ServiceRegistry

logger = logging.getLogger(__name__)


def _to_response(result: ActionResult) -> JSONResponse:
    return JSONResponse(
        status_code=result.status_code,
        content=result.to_dict(),
        headers=result.headers,
    )


async def _read_body(request: Request) -> Any:
    raw = await request.body()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError as e:
        raise ValidationError(f"Request body is not valid JSON: {e}") from e


def create_router(registry: ServiceRegistry, path_prefix: str = DEFAULT_PATH_PREFIX) -> APIRouter:
    """Router exposing ``registry`` actions and its OpenAPI document."""
    router = APIRouter()
    path_prefix = path_prefix.rstrip("/")

    @router.get("/openapi.json", tags=["docs"])
    async def openapi_document(request: Request) -> dict[str, Any]:
        """OpenAPI document of the registered services."""
        return registry.openapi(host=str(request.base_url), path_prefix=path_prefix)

    @router.get("/resources", tags=["docs"])
    async def resource_catalog() -> list[dict[str, Any]]:
        return registry.catalog()

    @router.post(path_prefix + "/{resource}/{action:path}", tags=["actions"])
    async def dispatch_action(resource: str, action: str, request: Request) -> JSONResponse:
        params = request.path_params
        try:
            body = await _read_body(request)
        except ValidationError as e:
            return _to_response(ActionResult.from_error(e))

        result = await registry.dispatch(
            ActionRequest(
                resource=resource,
                action=action,
                app=params.get("app", ""),
                version=params.get("version"),
                path=request.url.path,
                body=body,
                cookies=dict(request.cookies),
                headers=dict(request.headers),
            )
        )
        return _to_response(result)

    return router
