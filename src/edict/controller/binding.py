"""Binding of action names to directive classes."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from edict.directive import Directive, Failure
from edict.persistence import StorageAdapter

logger = logging.getLogger(__name__)

SUCCESS = 200
CREATED = 201
UNPROCESSABLE = 422


@dataclass(frozen=True)
class DirectiveResponse:
    """Status and JSON-friendly body produced by one directive run."""

    status: int
    body: Any
    failure: Failure | None = None

    @property
    def ok(self) -> bool:
        return self.status < 400


class DirectiveController:
    """Runs the directive bound to an action.

    Example:
        controller = DirectiveController({"create_order": CreateOrder}, storage=storage)
        response = controller.handle("create_order", {"code": "A1"}, method="POST")
    """

    def __init__(
        self,
        directives: Mapping[str, type[Directive]],
        storage: StorageAdapter | None = None,
    ):
        for action, directive_class in directives.items():
            if not (isinstance(directive_class, type) and issubclass(directive_class, Directive)):
                raise TypeError(f"Action '{action}' must map to a Directive subclass")
        self.directives = MappingProxyType(dict(directives))
        self.storage = storage

    def actions(self) -> list[str]:
        return list(self.directives)

    def handle(self, action: str, params: Any, method: str = "GET") -> DirectiveResponse:
        """Execute the directive for ``action`` with ``params``.

        Raises:
            KeyError: If no directive is bound to ``action``
        """
        directive_class = self.directives[action]
        directive = directive_class(params, storage=self.storage)

        if directive.execute():
            status = CREATED if method.upper() == "POST" else SUCCESS
            logger.debug("Action %s succeeded with %d", action, status)
            return DirectiveResponse(status=status, body=directive.as_dict())

        logger.info("Action %s failed: %s", action, directive.errors.to_dict())
        return DirectiveResponse(
            status=UNPROCESSABLE,
            body=directive.errors.to_dict(),
            failure=directive.failure,
        )
