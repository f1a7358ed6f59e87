"""Named hooks for YAML directive schemas.

A YAML schema cannot hold Python callables, so its gates, model loaders
and transaction handlers are written as names. ``DirectiveSchema.from_dict``
resolves each name here; schemas built in Python may pass callables
directly and never touch the registry.
"""

from collections.abc import Callable

from edict.exceptions import HookNotRegistered
from edict.hooks.types import HookFn


class HookRegistry:
    """Name -> callable table shared by every loaded schema.

    A module defining hooks must be imported before its schemas load
    (``edict --import myapp.hooks schema validate``), otherwise the
    loader fails on the first unknown name.

    Example:
        @hook("loadOrder")
        def load_order(directive):
            return orders.find_one({"code": directive.code})
    """

    _hooks: dict[str, Callable] = {}

    @classmethod
    def register(cls, name: str, hook_fn: Callable) -> None:
        """Bind ``name`` to ``hook_fn``.

        The first binding wins; importing a hook module twice leaves the
        table unchanged.
        """
        if name in cls._hooks:
            return
        cls._hooks[name] = hook_fn

    @classmethod
    def get(cls, name: str) -> Callable:
        """Resolve a hook name from a schema.

        Raises:
            HookNotRegistered: No module registered ``name``
        """
        if name not in cls._hooks:
            raise HookNotRegistered(name)
        return cls._hooks[name]

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name in cls._hooks

    @classmethod
    def list_registered(cls) -> list[str]:
        """Hook names, sorted."""
        return sorted(cls._hooks)

    @classmethod
    def clear(cls) -> None:
        """Forget every hook. Tests call this between cases."""
        cls._hooks.clear()


def hook(name: str) -> Callable[[HookFn], HookFn]:
    """Register the decorated function under ``name``.

    Gates take the directive and return a bool; loaders take the
    directive and return a model; transaction handlers take
    ``(uow, directive)``:

        @hook("ownerOnly")
        def owner_only(directive) -> bool:
            return directive.order.owner_id == directive.user_id
    """

    def decorator(fn: HookFn) -> HookFn:
        HookRegistry.register(name, fn)
        return fn

    return decorator
