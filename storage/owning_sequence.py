"""Singly linked sequence that owns its elements."""

from __future__ import annotations

import copy
from typing import Any, Callable, Generic, Iterable, Iterator, Optional, TypeVar

T = TypeVar("T")


class _Node(Generic[T]):
    __slots__ = ("value", "next")

    def __init__(self, value: T) -> None:
        self.value = value
        self.next: Optional[_Node[T]] = None


class OwningSequence(Generic[T]):
    """Append-only linked sequence whose copies never share nodes or values.

    Elements are stored in insertion order. Copying (``copy()``,
    ``copy.copy``, ``copy.deepcopy`` or ``assign``) duplicates every element
    with ``copy.deepcopy`` so two sequences never alias each other.
    """

    def __init__(self, values: Iterable[T] = ()) -> None:
        self._head: Optional[_Node[T]] = None
        self._tail: Optional[_Node[T]] = None
        self._count = 0
        for value in values:
            self.append(value)

    def append(self, value: T) -> None:
        node = _Node(value)
        if self._tail is None:
            self._head = node
        else:
            self._tail.next = node
        self._tail = node
        self._count += 1

    def find(self, value: T) -> Optional[T]:
        """Return the first element equal to ``value``, or ``None``."""
        return self.find_first(lambda candidate: candidate == value)

    def find_first(self, predicate: Callable[[T], bool]) -> Optional[T]:
        node = self._head
        while node is not None:
            if predicate(node.value):
                return node.value
            node = node.next
        return None

    def size(self) -> int:
        return self._count

    def is_empty(self) -> bool:
        return self._count == 0

    def head(self) -> Optional[T]:
        if self._head is None:
            return None
        return self._head.value

    def for_each(self, operation: Callable[[T], Any]) -> None:
        """Apply ``operation`` to every element in insertion order.

        The operation may change external state but must not append to or
        clear this sequence; doing so raises ``RuntimeError``.
        """
        expected = self._count
        node = self._head
        while node is not None:
            operation(node.value)
            if self._count != expected:
                raise RuntimeError("OwningSequence changed size during traversal")
            node = node.next

    def clear(self) -> None:
        node = self._head
        while node is not None:
            following = node.next
            node.next = None
            node = following
        self._head = None
        self._tail = None
        self._count = 0

    def copy(self) -> OwningSequence[T]:
        duplicate: OwningSequence[T] = type(self)()
        duplicate._extend_copies(self)
        return duplicate

    def assign(self, other: OwningSequence[T]) -> OwningSequence[T]:
        """Replace this sequence's contents with a deep copy of ``other``."""
        if other is self:
            return self
        self.clear()
        self._extend_copies(other)
        return self

    def _extend_copies(self, source: OwningSequence[T], memo: dict | None = None) -> None:
        node = source._head
        while node is not None:
            self.append(copy.deepcopy(node.value, memo))
            node = node.next

    def __copy__(self) -> OwningSequence[T]:
        return self.copy()

    def __deepcopy__(self, memo: dict) -> OwningSequence[T]:
        duplicate: OwningSequence[T] = type(self)()
        memo[id(self)] = duplicate
        duplicate._extend_copies(self, memo)
        return duplicate

    def __len__(self) -> int:
        return self._count

    def __bool__(self) -> bool:
        return self._count > 0

    def __iter__(self) -> Iterator[T]:
        node = self._head
        while node is not None:
            yield node.value
            node = node.next

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OwningSequence):
            return NotImplemented
        if self._count != other._count:
            return False
        return all(left == right for left, right in zip(self, other))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self)!r})"
