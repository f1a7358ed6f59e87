"""Recursive error tree reported by directives and records.

An error tree maps keys (field or model names, or integer indexes for
collection members) to either a leaf of messages or a nested tree:

    {"order": {"code": {"base": ["is required"]}},
     "line_items": {1: {"quantity": {"base": ["is required"]}}}}

``ErrorLeaf`` and ``ErrorTree`` are the two node kinds. Merging and
serialization walk them exhaustively.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Union

BASE = "base"

ErrorKey = Union[str, int]


@dataclass
class ErrorLeaf:
    """Messages attached to one key."""

    messages: list[str] = field(default_factory=list)

    def add(self, message: str) -> None:
        if message not in self.messages:
            self.messages.append(message)

    def extend(self, messages: list[str]) -> None:
        for message in messages:
            self.add(message)

    def to_list(self) -> list[str]:
        return list(self.messages)


ErrorNode = Union[ErrorLeaf, "ErrorTree"]


class ErrorTree:
    """Keyed error node. Only grows during a lifecycle run."""

    def __init__(self) -> None:
        self._children: dict[ErrorKey, ErrorNode] = {}

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    def add(self, key: ErrorKey, message: str) -> None:
        """Append ``message`` to the base leaf under ``key``."""
        self.subtree(key).add_base(message)

    def add_base(self, message: str) -> None:
        """Append ``message`` to this tree's own base leaf."""
        leaf = self._children.get(BASE)
        if not isinstance(leaf, ErrorLeaf):
            leaf = ErrorLeaf()
            self._children[BASE] = leaf
        leaf.add(message)

    def subtree(self, key: ErrorKey) -> ErrorTree:
        """Get or create the keyed child tree under ``key``."""
        node = self._children.get(key)
        if isinstance(node, ErrorTree):
            return node
        if isinstance(node, ErrorLeaf):
            raise TypeError(f"Error key '{key}' holds messages, not a nested tree")
        tree = ErrorTree()
        self._children[key] = tree
        return tree

    def merge(self, other: ErrorTree | Mapping[Any, Any]) -> None:
        """Deep merge ``other`` into this tree."""
        if not isinstance(other, ErrorTree):
            other = ErrorTree.from_dict(other)

        for key, node in other._children.items():
            if isinstance(node, ErrorLeaf):
                mine = self._children.get(key)
                if isinstance(mine, ErrorLeaf):
                    mine.extend(node.messages)
                elif mine is None:
                    self._children[key] = ErrorLeaf(list(node.messages))
                else:
                    raise TypeError(f"Cannot merge messages into nested error key '{key}'")
            else:
                self.subtree(key).merge(node)

    def merge_at(
        self,
        key: ErrorKey,
        index_or_other: ErrorKey | ErrorTree | Mapping[Any, Any],
        other: ErrorTree | Mapping[Any, Any] | None = None,
    ) -> None:
        """Merge under ``errors[key]``, or under ``errors[key][index]``.

        Call as ``merge_at(key, other)`` or ``merge_at(key, index, other)``.
        """
        if other is None:
            self.subtree(key).merge(index_or_other)
        else:
            self.subtree(key).subtree(index_or_other).merge(other)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def is_empty(self) -> bool:
        return not self._children

    def messages(self) -> list[str]:
        """Messages attached directly to this tree (its base leaf)."""
        leaf = self._children.get(BASE)
        return leaf.to_list() if isinstance(leaf, ErrorLeaf) else []

    def get(self, key: ErrorKey) -> ErrorNode | None:
        return self._children.get(key)

    def keys(self) -> list[ErrorKey]:
        return list(self._children)

    def to_dict(self) -> dict[ErrorKey, Any]:
        """Serialize to plain nested dicts and lists."""
        result: dict[ErrorKey, Any] = {}
        for key, node in self._children.items():
            if isinstance(node, ErrorLeaf):
                result[key] = node.to_list()
            else:
                result[key] = node.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: Mapping[Any, Any]) -> ErrorTree:
        """Build a tree from plain nested dicts (lists become leaves)."""
        tree = cls()
        for key, value in data.items():
            if isinstance(value, Mapping):
                tree._children[key] = cls.from_dict(value)
            elif isinstance(value, (list, tuple)):
                tree._children[key] = ErrorLeaf([str(v) for v in value])
            else:
                tree._children[key] = ErrorLeaf([str(value)])
        return tree

    def __bool__(self) -> bool:
        return bool(self._children)

    def __len__(self) -> int:
        return len(self._children)

    def __contains__(self, key: object) -> bool:
        return key in self._children

    def __getitem__(self, key: ErrorKey) -> ErrorNode:
        return self._children[key]

    def __iter__(self) -> Iterator[ErrorKey]:
        return iter(self._children)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ErrorTree):
            return self.to_dict() == other.to_dict()
        if isinstance(other, Mapping):
            return self.to_dict() == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"ErrorTree({self.to_dict()!r})"
