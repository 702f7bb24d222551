"""Insertion-ordered set used to deduplicate recipe entries."""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Iterator
from typing import Generic, TypeVar

T = TypeVar("T", bound=Hashable)


class OrderedSet(Generic[T]):
    """A set that iterates in first-insertion order.

    Re-adding an item that is already present is a no-op and does not move
    it, so output built from the set is stable for a given input order.
    """

    def __init__(self, items: Iterable[T] = ()) -> None:
        self._items: dict[T, None] = {}
        for item in items:
            self.add(item)

    def add(self, item: T) -> bool:
        """Insert item if absent. Returns True when it was newly added."""
        if item in self._items:
            return False
        self._items[item] = None
        return True

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __repr__(self) -> str:
        return f"OrderedSet({list(self._items)!r})"
