"""FastAPI endpoints exposing directive actions."""

import json
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from edict.controller.binding import DirectiveController

ACTION_METHODS = ["GET", "POST", "PUT", "PATCH"]


# =============================================================================
# Response models
# =============================================================================


class ActionList(BaseModel):
    actions: list[str]


class ActionResult(BaseModel):
    """Outcome of one action: ``data`` on success, ``errors`` otherwise."""

    data: dict[str, Any] | None = None
    errors: dict[Any, Any] | None = None
    failure: dict[str, Any] | None = None


async def _read_params(request: Request) -> Any:
    """Query params for GET, JSON body otherwise (empty body means no params)."""
    if request.method == "GET":
        return dict(request.query_params)

    raw = await request.body()
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        raise HTTPException(400, "Request body must be JSON") from None


def create_directive_router(controller: DirectiveController, prefix: str = "") -> APIRouter:
    """Create the directive router with an injected controller."""
    router = APIRouter(prefix=prefix, tags=["directives"])

    @router.get("/", response_model=ActionList)
    async def list_actions() -> ActionList:
        """Return the bound action names."""
        return ActionList(actions=controller.actions())

    @router.api_route("/{action}", methods=ACTION_METHODS, response_model=ActionResult)
    async def run_action(action: str, request: Request) -> JSONResponse:
        """Execute the directive bound to ``action``."""
        if action not in controller.directives:
            raise HTTPException(404, f"Action not found: {action}")

        params = await _read_params(request)
        response = controller.handle(action, params, method=request.method)

        fields: dict[str, Any] = {"data" if response.ok else "errors": response.body}
        if response.failure is not None:
            fields["failure"] = response.failure.to_dict()
        result = ActionResult(**fields)
        return JSONResponse(
            status_code=response.status,
            content=jsonable_encoder(result.model_dump(exclude_unset=True)),
        )

    return router
