"""Directive lifecycle.

A directive is created per request from raw params. Its class-level
schema derives properties, loads related models, checks validity and
persists inside one unit of work:

    execute = valid and clean and load and validate and persist

where each stage runs as ``before-gate and body and after-gate``. The
first false result aborts the run and leaves the error tree (and the
``failure`` value) for the caller.

Example:
    class CreateOrder(Directive):
        schema = (
            SchemaBuilder("CreateOrder")
            .props({"code": [("get", "code"), "strip"]})
            .model("order", lambda d: Order(d.storage, {"code": d.code}))
            .transaction(lambda uow, d: uow.persist(d.order))
            .build()
        )

    directive = CreateOrder({"code": " A1 "}, storage=storage)
    if not directive.execute():
        print(directive.errors.to_dict())
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Union

from edict.chain import PropertyChain
from edict.directive.schema import DirectiveSchema
from edict.errors import ErrorTree
from edict.hooks import CallbackGate, Phase, Stage
from edict.persistence import PersistenceFailure, PersistenceResult, StorageAdapter, UnitOfWork
from edict.values import is_blank, is_collection

logger = logging.getLogger(__name__)

REQUIRED = "is required"
NOT_FOUND = "not found"
INVALID = "is invalid"


class DirectiveState(Enum):
    """Lifecycle position of a directive instance."""

    INIT = "init"
    PROPERTIES_COMPUTED = "properties_computed"
    CLEANED = "cleaned"
    LOADED = "loaded"
    VALIDATED = "validated"
    PERSISTED = "persisted"
    ABORTED = "aborted"


STAGE_STATES = {
    Stage.CLEAN: DirectiveState.CLEANED,
    Stage.LOAD: DirectiveState.LOADED,
    Stage.VALIDATE: DirectiveState.VALIDATED,
    Stage.PERSIST: DirectiveState.PERSISTED,
}


@dataclass(frozen=True)
class GateRejection:
    """A before/after gate returned false."""

    stage: Stage
    phase: Phase

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "gate", "stage": self.stage.value, "phase": self.phase.value}


@dataclass(frozen=True)
class StageFailure:
    """A stage body returned false. ``stage`` is None when input was invalid on entry."""

    stage: Stage | None

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "stage", "stage": self.stage.value if self.stage else None}


Failure = Union[GateRejection, StageFailure, PersistenceFailure]


def _validatable(value: Any) -> bool:
    return callable(getattr(value, "invalid", None)) and hasattr(value, "errors")


def _snapshot(value: Any) -> Any:
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if isinstance(value, Mapping):
        return {k: _snapshot(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_snapshot(v) for v in value]
    return value


class Directive:
    """Base class for per-request directives.

    Subclasses declare ``schema``. ``storage`` may be set on the class
    or passed per instance; it is only needed when the schema declares
    transactions.
    """

    schema: ClassVar[DirectiveSchema] = DirectiveSchema()
    storage: ClassVar[StorageAdapter | None] = None
    eager: ClassVar[bool] = False

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if not isinstance(cls.schema, DirectiveSchema):
            raise TypeError(
                f"{cls.__name__}.schema must be a DirectiveSchema, "
                f"got {type(cls.schema).__name__}"
            )

    def __init__(self, params: Any = None, storage: StorageAdapter | None = None):
        self.params = params if params is not None else {}
        if storage is not None:
            self.storage = storage
        self.errors = ErrorTree()
        self.models: dict[str, Any] = {}
        self.failure: Failure | None = None
        self.persistence: PersistenceResult | None = None
        self.state = DirectiveState.INIT

        self.props: dict[str, Any] = {
            name: chain.apply(self.params) for name, chain in self.schema.properties.items()
        }
        self.state = DirectiveState.PROPERTIES_COMPUTED

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def __getattr__(self, name: str) -> Any:
        # Only reached for names not found normally: models, then props
        schema = type(self).schema
        state = self.__dict__
        if name in schema.models:
            return state.get("models", {}).get(name)
        if name in schema.properties and "props" in state:
            return state["props"].get(name)
        raise AttributeError(f"'{type(self).__name__}' has no attribute '{name}'")

    def get(self, name: str) -> Any:
        """Model or property by name; models win."""
        if name in self.schema.models:
            return self.models.get(name)
        if name in self.props:
            return self.props[name]
        return getattr(self, name)

    def extract(self, *names: str) -> list[Any]:
        return [self.get(name) for name in names]

    def chain(self, obj: Any, steps: Any) -> Any:
        """Evaluate an ad-hoc property chain against ``obj``."""
        return PropertyChain.of(steps).apply(obj)

    def valid(self) -> bool:
        return self.errors.is_empty()

    def invalid(self) -> bool:
        return not self.valid()

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def clean(self) -> bool:
        for name in self.schema.required_fields:
            if is_blank(self.props.get(name)):
                self.errors.add(name, REQUIRED)
        return self.valid()

    def load(self) -> bool:
        if not self.valid():
            return False
        for name, loader in self.schema.models.items():
            self.models[name] = CallbackGate.dispatch(self, loader)
        return self.valid()

    def validate(self) -> bool:
        if not self.valid():
            return False
        self.check({name: self.get(name) for name in self.schema.check_targets()})
        return self.valid()

    def persist(self) -> bool:
        if not self.valid():
            return False

        handlers = self.schema.transactions
        if not handlers:
            self.persistence = PersistenceResult.success()
            return True

        storage = self.storage
        if storage is None:
            raise RuntimeError(
                f"{type(self).__name__} declares transactions but has no storage"
            )

        def block(uow: UnitOfWork) -> bool | None:
            for handler in handlers:
                if handler(uow, self) is False:
                    return False
            return None

        self.persistence = UnitOfWork.transaction(storage, block, eager=self.eager)
        return bool(self.persistence)

    # ------------------------------------------------------------------
    # Validity checks
    # ------------------------------------------------------------------

    def check(self, targets: Mapping[str, Any]) -> None:
        """Merge the errors of each target into ``errors[key]``.

        Raises:
            TypeError: If a target cannot report its own validity
        """
        for key, target in targets.items():
            if target is None:
                self.errors.add(key, NOT_FOUND)
            elif is_collection(target):
                self.check_many(key, target)
            else:
                self.check_one(key, target)

    def check_one(self, key: str, target: Any) -> None:
        self._require_validatable(key, target)
        if target.invalid():
            self._merge_invalid(self.errors.subtree(key), target)

    def check_many(self, key: str, targets: Any) -> None:
        for index, member in enumerate(targets):
            if member is None:
                self.errors.subtree(key).add(index, NOT_FOUND)
                continue
            self._require_validatable(f"{key}[{index}]", member)
            if member.invalid():
                self._merge_invalid(self.errors.subtree(key).subtree(index), member)

    @staticmethod
    def _require_validatable(key: str, target: Any) -> None:
        if not _validatable(target):
            raise TypeError(
                f"Cannot validate '{key}': {type(target).__name__} "
                "does not implement invalid() and errors"
            )

    @staticmethod
    def _merge_invalid(tree: ErrorTree, target: Any) -> None:
        errors = target.errors
        if not errors:
            tree.add_base(INVALID)
        else:
            tree.merge(errors)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def execute(self) -> bool:
        """Run every stage in order. Returns True when all of them pass."""
        if self.state is not DirectiveState.PROPERTIES_COMPUTED:
            raise RuntimeError(
                f"{type(self).__name__} has already run ({self.state.value}); "
                "create a new instance per request"
            )

        if not self.valid():
            return self._abort(StageFailure(None))

        for stage in Stage:
            if not self.executed(stage):
                return False
        logger.debug("%s executed", type(self).__name__)
        return True

    def executed(self, stage: Stage) -> bool:
        """Run one stage between its before and after gates."""
        callbacks = self.schema.callbacks

        if not CallbackGate.gate(self, callbacks, stage, Phase.BEFORE):
            return self._abort(GateRejection(stage, Phase.BEFORE))

        if not self._body(stage)():
            if stage is Stage.PERSIST and self.persistence is not None and self.persistence.failure:
                return self._abort(self.persistence.failure)
            return self._abort(StageFailure(stage))

        if not CallbackGate.gate(self, callbacks, stage, Phase.AFTER):
            return self._abort(GateRejection(stage, Phase.AFTER))

        self.state = STAGE_STATES[stage]
        logger.debug("%s completed %s", type(self).__name__, stage.value)
        return True

    def _body(self, stage: Stage):
        return {
            Stage.CLEAN: self.clean,
            Stage.LOAD: self.load,
            Stage.VALIDATE: self.validate,
            Stage.PERSIST: self.persist,
        }[stage]

    def _abort(self, failure: Failure) -> bool:
        self.failure = failure
        self.state = DirectiveState.ABORTED
        logger.info(
            "%s aborted: %s errors=%s",
            type(self).__name__,
            failure.to_dict(),
            self.errors.to_dict(),
        )
        return False

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def as_dict(self) -> dict[str, Any]:
        """JSON-friendly snapshot of props and resolved models."""
        snapshot = {name: _snapshot(value) for name, value in self.props.items()}
        snapshot.update({name: _snapshot(value) for name, value in self.models.items()})
        return snapshot

    def to_dict(self) -> dict[str, Any]:
        return self.as_dict()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(state={self.state.value}, errors={self.errors.to_dict()!r})"
