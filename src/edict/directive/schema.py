"""Directive schemas.

A ``DirectiveSchema`` is built once per directive type and never mutated
afterwards. Build it with ``SchemaBuilder`` in Python, or with
``DirectiveSchema.from_dict`` from declarative (YAML) data where hooks,
loaders and transaction handlers are referenced by registered name.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from edict.chain import PropertyChain
from edict.exceptions import SchemaError
from edict.hooks import (
    Gate,
    HookRegistry,
    Loader,
    Stage,
    StageCallbacks,
    hook_spec,
    parse_phase,
    parse_stage,
)

if TYPE_CHECKING:
    from edict.directive.base import Directive
    from edict.persistence import UnitOfWork

# Transaction handler signature: (unit_of_work, directive) -> None | bool
TransactionHandler = Callable[["UnitOfWork", "Directive"], Any]

_EMPTY: Mapping[Any, Any] = MappingProxyType({})


@dataclass(frozen=True, eq=False)
class DirectiveSchema:
    """Immutable declaration of a directive type.

    Attributes:
        properties: Property name -> chain deriving it from raw input
        models: Model name -> loader resolving it during the load stage
        validations: Names whose validity is checked during validate
        transactions: Handlers run inside one unit of work during persist
        callbacks: Stage -> before/after gates
        required: Properties that must not be blank (None means all of them)
        name: Directive name, used by loaders and the CLI
    """

    properties: Mapping[str, PropertyChain] = field(default_factory=lambda: _EMPTY)
    models: Mapping[str, Loader] = field(default_factory=lambda: _EMPTY)
    validations: tuple[str, ...] = ()
    transactions: tuple[TransactionHandler, ...] = ()
    callbacks: Mapping[Stage, StageCallbacks] = field(default_factory=lambda: _EMPTY)
    required: tuple[str, ...] | None = None
    name: str = ""

    def __post_init__(self) -> None:
        freeze = object.__setattr__
        freeze(self, "properties", MappingProxyType(dict(self.properties)))
        freeze(self, "models", MappingProxyType(dict(self.models)))
        freeze(self, "callbacks", MappingProxyType(dict(self.callbacks)))
        freeze(self, "validations", tuple(self.validations))
        freeze(self, "transactions", tuple(self.transactions))
        if self.required is not None:
            freeze(self, "required", tuple(self.required))

        for name, chain in self.properties.items():
            if not isinstance(chain, PropertyChain):
                raise SchemaError(f"Property '{name}' must be a PropertyChain")
        for name, loader in self.models.items():
            if not isinstance(loader, Loader):
                raise SchemaError(f"Model '{name}' must be declared with a Loader")
        for handler in self.transactions:
            if not callable(handler):
                raise SchemaError(f"Transaction handler {handler!r} is not callable")

        overlap = set(self.properties) & set(self.models)
        if overlap:
            raise SchemaError(
                f"Names declared as both property and model: {', '.join(sorted(overlap))}"
            )
        if self.required is not None:
            unknown = [n for n in self.required if n not in self.properties]
            if unknown:
                raise SchemaError(f"Required names are not properties: {', '.join(unknown)}")

    @property
    def required_fields(self) -> tuple[str, ...]:
        """Properties checked by the clean stage."""
        if self.required is None:
            return tuple(self.properties)
        return self.required

    def check_targets(self) -> tuple[str, ...]:
        """Validation targets followed by models, without repeats."""
        names = list(self.validations)
        names.extend(n for n in self.models if n not in names)
        return tuple(names)

    # ------------------------------------------------------------------
    # Declarative construction
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DirectiveSchema:
        """Create a schema from YAML/JSON data.

        Example:
            directive: CreateOrder
            properties:
              code: [[get, code], strip, presence]
            required: [code]
            models:
              order: loadOrder
            validations: [order]
            transactions: [saveOrder]
            callbacks:
              load: {before: ownerOnly}
        """
        builder = SchemaBuilder(name=data.get("directive", data.get("name", "")))

        properties = data.get("properties") or {}
        if not isinstance(properties, Mapping):
            raise SchemaError("'properties' must be a mapping of name -> chain")
        builder.props(properties)

        for name, loader in (data.get("models") or {}).items():
            builder.model(name, loader)

        builder.validate(*(data.get("validations") or []))

        for handler in data.get("transactions") or []:
            builder.transaction(handler)

        for stage, phases in (data.get("callbacks") or {}).items():
            if not isinstance(phases, Mapping):
                raise SchemaError(f"Callbacks for '{stage}' must map before/after to hooks")
            builder.callback(stage, **{parse_phase(p).value: h for p, h in phases.items()})

        if data.get("required") is not None:
            builder.require(*data["required"])

        return builder.build()

    def describe(self) -> dict[str, Any]:
        """Summary for display."""
        return {
            "name": self.name,
            "properties": {n: c.describe() for n, c in self.properties.items()},
            "required": list(self.required_fields),
            "models": {n: loader.name or "<callable>" for n, loader in self.models.items()},
            "validations": list(self.validations),
            "transactions": [getattr(h, "__name__", repr(h)) for h in self.transactions],
            "callbacks": {
                stage.value: {
                    "before": getattr(cbs.before, "name", None),
                    "after": getattr(cbs.after, "name", None),
                }
                for stage, cbs in self.callbacks.items()
            },
        }


class SchemaBuilder:
    """Fluent builder for DirectiveSchema.

    Example:
        schema = (
            SchemaBuilder("CreateOrder")
            .props({"code": [("get", "code"), "strip"]})
            .model("order", load_order)
            .validate("order")
            .transaction(save_order)
            .callback("load", before=owner_only)
            .build()
        )
    """

    def __init__(self, name: str = ""):
        self.name = name
        self._properties: dict[str, PropertyChain] = {}
        self._models: dict[str, Loader] = {}
        self._validations: list[str] = []
        self._transactions: list[TransactionHandler] = []
        self._callbacks: dict[Stage, StageCallbacks] = {}
        self._required: list[str] | None = None

    def props(self, schema: Mapping[str, Any]) -> SchemaBuilder:
        for name, steps in schema.items():
            self.prop(name, steps)
        return self

    def prop(self, name: str, steps: Any) -> SchemaBuilder:
        self._properties[name] = PropertyChain.of(steps)
        return self

    def model(self, name: str, loader: Any) -> SchemaBuilder:
        spec = hook_spec(loader, kind=Loader)
        if not isinstance(spec, Loader):
            raise SchemaError(f"Model '{name}' needs a loader")
        self._models[name] = spec
        return self

    def validate(self, *names: str) -> SchemaBuilder:
        for name in names:
            if name not in self._validations:
                self._validations.append(name)
        return self

    def transaction(self, handler: TransactionHandler | str) -> SchemaBuilder:
        if isinstance(handler, str):
            handler = HookRegistry.get(handler)
        self._transactions.append(handler)
        return self

    def callback(
        self,
        stage: Stage | str,
        before: Any = None,
        after: Any = None,
    ) -> SchemaBuilder:
        parsed = parse_stage(stage)
        current = self._callbacks.get(parsed, StageCallbacks())
        self._callbacks[parsed] = StageCallbacks(
            before=hook_spec(before, kind=Gate) if before is not None else current.before,
            after=hook_spec(after, kind=Gate) if after is not None else current.after,
        )
        return self

    def require(self, *names: str) -> SchemaBuilder:
        self._required = list(names)
        return self

    def build(self) -> DirectiveSchema:
        return DirectiveSchema(
            properties=self._properties,
            models=self._models,
            validations=tuple(self._validations),
            transactions=tuple(self._transactions),
            callbacks=self._callbacks,
            required=tuple(self._required) if self._required is not None else None,
            name=self.name,
        )
