"""Callback gate for Edict.

Dispatches hook specs against a directive instance. Absent hooks pass,
gates return booleans, loaders return whatever they resolve.
"""

import logging
from collections.abc import Mapping
from typing import Any

from edict.hooks.types import Gate, HookSpec, Loader, NoHook, Phase, Stage, StageCallbacks

logger = logging.getLogger(__name__)


class CallbackGate:
    """Runs stage gates and model loaders.

    Hook exceptions are not caught: a hook that raises is a bug in the
    hook, not a request outcome.
    """

    @staticmethod
    def dispatch(context: Any, spec: HookSpec | None) -> Any:
        """Invoke ``spec`` against ``context``.

        Returns:
            True for an absent hook, the boolean result of a gate, or the
            raw result of a loader.
        """
        if spec is None or isinstance(spec, NoHook):
            return True
        if isinstance(spec, Gate):
            return bool(spec.fn(context))
        if isinstance(spec, Loader):
            return spec.fn(context)
        raise TypeError(f"Unknown hook spec: {spec!r}")

    @classmethod
    def gate(
        cls,
        context: Any,
        callbacks: Mapping[Stage, StageCallbacks] | None,
        stage: Stage,
        phase: Phase,
    ) -> bool:
        """Run the before/after gate declared for ``stage``.

        Missing callback maps and undeclared stages pass.
        """
        if not callbacks:
            return True
        declared = callbacks.get(stage)
        if declared is None:
            return True

        spec = declared.for_phase(phase)
        passed = bool(cls.dispatch(context, spec))
        if not passed:
            logger.debug(
                "Gate %s(%s) rejected %s",
                phase.value,
                stage.value,
                type(context).__name__,
            )
        return passed
