"""Edict directive lifecycle hook system.

Provides extension points around each directive stage
(clean, load, validate, persist):
- before: runs before the stage body (can abort)
- after: runs after the stage body (can abort)

and model loaders that resolve related entities during load.

Usage:
    from edict.hooks import hook

    @hook("ownerOnly")
    def owner_only(directive) -> bool:
        return directive.props["user_id"] == directive.order["user_id"]
"""

from edict.hooks.registry import HookRegistry, hook
from edict.hooks.service import CallbackGate
from edict.hooks.types import (
    NO_HOOK,
    Gate,
    HookFn,
    HookSpec,
    Loader,
    NoHook,
    Phase,
    Stage,
    StageCallbacks,
    hook_spec,
    parse_phase,
    parse_stage,
)

__all__ = [
    "CallbackGate",
    "Gate",
    "HookFn",
    "HookRegistry",
    "HookSpec",
    "Loader",
    "NO_HOOK",
    "NoHook",
    "Phase",
    "Stage",
    "StageCallbacks",
    "hook",
    "hook_spec",
    "parse_phase",
    "parse_stage",
]
