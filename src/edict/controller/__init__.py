"""Controller binding and HTTP endpoints."""

from edict.controller.binding import DirectiveController, DirectiveResponse
from edict.controller.endpoints import create_directive_router

__all__ = ["DirectiveController", "DirectiveResponse", "create_directive_router"]
