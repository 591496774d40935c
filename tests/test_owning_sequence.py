"""Unit tests for the owning linked sequence."""

from __future__ import annotations

import copy

import pytest

from storage.owning_sequence import OwningSequence


def test_new_sequence_is_empty() -> None:
    sequence: OwningSequence[int] = OwningSequence()

    assert sequence.size() == 0
    assert sequence.is_empty()
    assert sequence.head() is None
    assert list(sequence) == []


def test_append_counts_and_preserves_order() -> None:
    sequence: OwningSequence[int] = OwningSequence()
    for value in (3, 1, 4, 1, 5):
        sequence.append(value)

    visited: list[int] = []
    sequence.for_each(visited.append)

    assert sequence.size() == 5
    assert len(sequence) == 5
    assert not sequence.is_empty()
    assert sequence.head() == 3
    assert visited == [3, 1, 4, 1, 5]


def test_find_returns_first_match_or_none() -> None:
    sequence = OwningSequence(["a", "b", "c"])

    assert sequence.find("b") == "b"
    assert sequence.find("z") is None
    assert sequence.find_first(lambda value: value > "a") == "b"


def test_clear_is_idempotent() -> None:
    sequence = OwningSequence([1, 2, 3])

    sequence.clear()
    sequence.clear()

    assert sequence.size() == 0
    assert sequence.head() is None
    sequence.append(7)
    assert list(sequence) == [7]


def test_copy_is_deep_and_independent() -> None:
    original = OwningSequence([[1], [2, 3]])

    duplicate = original.copy()
    duplicate.head().append(99)
    duplicate.clear()

    assert original.size() == 2
    assert list(original) == [[1], [2, 3]]


def test_stdlib_copy_protocols_produce_deep_copies() -> None:
    original = OwningSequence([{"v": 1}])

    shallow = copy.copy(original)
    deep = copy.deepcopy(original)
    shallow.head()["v"] = 2
    deep.head()["v"] = 3

    assert original.head() == {"v": 1}
    assert deep.head() == {"v": 3}
    assert shallow == OwningSequence([{"v": 2}])


def test_assign_replaces_contents_with_copy() -> None:
    source = OwningSequence([[1], [2]])
    target = OwningSequence([[9]])

    target.assign(source)
    target.head().append(5)

    assert list(target) == [[1, 5], [2]]
    assert list(source) == [[1], [2]]


def test_self_assignment_is_noop() -> None:
    sequence = OwningSequence([1, 2])

    assert sequence.assign(sequence) is sequence
    assert list(sequence) == [1, 2]


def test_for_each_rejects_structural_changes() -> None:
    sequence = OwningSequence([1, 2])

    with pytest.raises(RuntimeError):
        sequence.for_each(lambda value: sequence.append(value))


def test_for_each_allows_external_state_mutation() -> None:
    sequence = OwningSequence([1.5, 2.5])
    total = {"sum": 0.0}

    def accumulate(value: float) -> None:
        total["sum"] += value

    sequence.for_each(accumulate)

    assert total["sum"] == 4.0
