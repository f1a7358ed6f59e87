"""Unit of work: persistence operations that commit or roll back together.

Two execution modes share one interface:

- queued (default): ``save``/``update``/``create``/``destroy``/``persist``/
  ``denormalize`` enqueue steps; ``commit()`` opens one storage
  transaction and replays them in order.
- eager: operations write through immediately inside the transaction
  opened by ``UnitOfWork.transaction(..., eager=True)``.

Either way the first failing operation rolls back every write of the
batch, including writes of operations that succeeded before it.

Usage:
    def save_order(uow, directive):
        uow.persist(directive.order, directive.order.line_items)
        uow.denormalize(directive.order, {"total": {"line_items": {"sum": "price"}}})

    result = UnitOfWork.transaction(storage, lambda uow: save_order(uow, d))
    if not result:
        print(result.failure.cause)
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from edict.exceptions import SchemaError, StorageError
from edict.persistence.adapter import StorageAdapter
from edict.persistence.aggregates import AGGREGATES
from edict.persistence.results import PersistenceFailure, PersistenceResult

logger = logging.getLogger(__name__)


class _Rollback(Exception):
    """Raised inside the storage transaction to force a rollback."""


@dataclass(frozen=True)
class _Step:
    operation: str
    run: Callable[[], bool]


def _is_collection(model: Any) -> bool:
    return isinstance(model, (list, tuple, set, frozenset))


def _describe(model: Any) -> str:
    errors = getattr(model, "errors", None)
    name = type(model).__name__
    if errors:
        detail = errors.to_dict() if hasattr(errors, "to_dict") else errors
        return f"{name} is invalid: {detail}"
    return name


class UnitOfWork:
    """Batch of persistence operations executed in one transaction."""

    def __init__(self, storage: StorageAdapter, eager: bool = False):
        self.storage = storage
        self.eager = eager
        self._steps: list[_Step] = []
        self._failure: PersistenceFailure | None = None
        self._restores: list[Callable[[], None]] = []

    @property
    def failure(self) -> PersistenceFailure | None:
        return self._failure

    @property
    def pending(self) -> int:
        """Number of queued operations."""
        return len(self._steps)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def save(self, *models: Any) -> bool:
        return self._enqueue("save", models, lambda m: m.save())

    def update(self, *models: Any) -> bool:
        return self._enqueue("update", models, lambda m: m.update())

    def create(self, *models: Any) -> bool:
        return self._enqueue("create", models, lambda m: m.create())

    def destroy(self, *models: Any) -> bool:
        return self._enqueue("destroy", models, lambda m: m.destroy())

    def persist(self, *models: Any) -> bool:
        """Destroy models marked for destruction, save the rest."""
        return self._enqueue("persist", models, self._save_or_destroy)

    def denormalize(self, model: Any, schema: Mapping[str, Any]) -> bool:
        """Copy aggregates of associations onto ``model``, then save it.

        Args:
            model: The record receiving the aggregated values
            schema: ``{field: {association: {aggregate: subfield}}}``,
                e.g. ``{"total": {"line_items": {"sum": "price"}}}``
        """
        plan = [self._parse_denormalization(field, spec) for field, spec in schema.items()]

        def run() -> bool:
            for field, association, aggregate, subfield in plan:
                collection = _association(model, association)
                model[field] = _aggregate(collection, aggregate, subfield)
            return self._apply("denormalize", (model,), lambda m: m.save())

        return self._add(_Step("denormalize", run))

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def commit(self) -> PersistenceResult:
        """Run every queued operation inside one storage transaction."""
        steps, self._steps = self._steps, []
        self._failure = None

        if self.storage.in_transaction:
            logger.warning(
                "Unit of work joined an already-open transaction; "
                "a failure will only roll back when the outer transaction does"
            )

        try:
            with self.storage.transaction():
                for step in steps:
                    if not step.run():
                        raise _Rollback()
        except _Rollback:
            return self._rolled_back()
        except StorageError as e:
            self._failure = PersistenceFailure(operation="commit", cause=str(e), error=e)
            return self._rolled_back()

        self._restores = []
        logger.debug("Unit of work committed %d operation(s)", len(steps))
        return PersistenceResult.success()

    @classmethod
    def transaction(
        cls,
        storage: StorageAdapter,
        block: Callable[["UnitOfWork"], Any],
        eager: bool = False,
    ) -> PersistenceResult:
        """Run ``block(uow)`` and commit its operations atomically.

        ``block`` returning ``False`` aborts the batch without writing.
        """
        uow = cls(storage, eager=eager)
        if not eager:
            if block(uow) is False:
                return PersistenceResult.failed("transaction", "transaction block returned false")
            return uow.commit()

        try:
            with storage.transaction():
                outcome = block(uow)
                if uow._failure is not None:
                    raise _Rollback()
                if outcome is False:
                    uow._failure = PersistenceFailure(
                        operation="transaction",
                        cause="transaction block returned false",
                    )
                    raise _Rollback()
        except _Rollback:
            return uow._rolled_back()
        except StorageError as e:
            uow._failure = PersistenceFailure(operation="commit", cause=str(e), error=e)
            return uow._rolled_back()

        uow._restores = []
        return PersistenceResult.success()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _rolled_back(self) -> PersistenceResult:
        # Later snapshots first, so a record touched twice ends in its earliest state.
        for restore in reversed(self._restores):
            restore()
        self._restores = []
        logger.info(
            "Unit of work rolled back after %s: %s",
            self._failure.operation,
            self._failure.cause,
        )
        return PersistenceResult(ok=False, failure=self._failure)

    def _add(self, step: _Step) -> bool:
        if not self.eager:
            self._steps.append(step)
            return True
        if self._failure is not None:
            return False
        return step.run()

    def _enqueue(
        self,
        operation: str,
        models: Iterable[Any],
        action: Callable[[Any], bool],
    ) -> bool:
        models = tuple(models)
        return self._add(_Step(operation, lambda: self._apply(operation, models, action)))

    def _apply(
        self,
        operation: str,
        models: Iterable[Any],
        action: Callable[[Any], bool],
    ) -> bool:
        """Apply ``action`` to every model, stopping at the first failure."""
        for model in models:
            members = model if _is_collection(model) else (model,)
            for member in members:
                snapshot = getattr(member, "snapshot", None)
                if callable(snapshot):
                    self._restores.append(snapshot())
                try:
                    ok = action(member)
                except StorageError as e:
                    self._failure = PersistenceFailure(
                        operation=operation, cause=str(e), model=member, error=e
                    )
                    return False
                if not ok:
                    self._failure = PersistenceFailure(
                        operation=operation,
                        cause=f"{operation} failed: {_describe(member)}",
                        model=member,
                    )
                    return False
        return True

    @staticmethod
    def _save_or_destroy(model: Any) -> bool:
        if model.marked_for_destruction():
            return model.destroy()
        return model.save()

    @staticmethod
    def _parse_denormalization(field: str, spec: Any) -> tuple[str, str, str, str]:
        if not isinstance(spec, Mapping) or len(spec) != 1:
            raise SchemaError(
                f"Denormalization of '{field}' must be {{association: {{aggregate: subfield}}}}"
            )
        (association, aggregation), = spec.items()
        if not isinstance(aggregation, Mapping) or len(aggregation) != 1:
            raise SchemaError(
                f"Denormalization of '{field}' must name one aggregate and one subfield"
            )
        (aggregate, subfield), = aggregation.items()
        if aggregate not in AGGREGATES:
            raise SchemaError(
                f"Unknown aggregate '{aggregate}'. Expected one of: {', '.join(AGGREGATES)}"
            )
        return field, association, aggregate, subfield


def _association(model: Any, name: str) -> Any:
    if isinstance(model, Mapping):
        return model.get(name)
    return getattr(model, name)


def _aggregate(collection: Any, aggregate: str, subfield: str) -> Any:
    """Prefer the association's own aggregate method, e.g. ``items.sum("price")``."""
    if collection is None:
        collection = []
    elif not _is_collection(collection):
        method = getattr(collection, aggregate, None)
        if callable(method):
            return method(subfield)
    return AGGREGATES[aggregate](collection, subfield)
