"""
Eager scanners over materialized sequences.

These complement what lists and tuples already offer: prefix and suffix
tests, searches that return -1 instead of raising, and a left fold whose
combine function takes (element, accumulator).
"""

from typing import Any, Callable, Iterable, Sequence, TypeVar

E = TypeVar("E")
A = TypeVar("A")

NOT_FOUND = -1


def has_prefix(values: Sequence[Any], prefix: Sequence[Any]) -> bool:
    """Return True if values starts with prefix"""
    for i, item in enumerate(prefix):
        if i == len(values) or values[i] != item:
            return False
    return True


def has_suffix(values: Sequence[Any], suffix: Sequence[Any]) -> bool:
    """Return True if values ends with suffix"""
    if len(suffix) > len(values):
        return False
    j = len(values) - 1
    for i in range(len(suffix) - 1, -1, -1):
        if values[j] != suffix[i]:
            return False
        j -= 1
    return True


def index(values: Sequence[Any], value: Any) -> int:
    """Return the position of the leftmost value, or -1 if it isn't present"""
    for i, item in enumerate(values):
        if item == value:
            return i
    return NOT_FOUND


def index_func(values: Sequence[E], found: Callable[[E], bool]) -> int:
    """Return the position of the leftmost item for which found() is true, or -1"""
    for i, item in enumerate(values):
        if found(item):
            return i
    return NOT_FOUND


def last_index(values: Sequence[Any], value: Any) -> int:
    """Return the position of the rightmost value, or -1 if it isn't present"""
    for i in range(len(values) - 1, -1, -1):
        if values[i] == value:
            return i
    return NOT_FOUND


def last_index_func(values: Sequence[E], found: Callable[[E], bool]) -> int:
    """Return the position of the rightmost item for which found() is true, or -1"""
    for i in range(len(values) - 1, -1, -1):
        if found(values[i]):
            return i
    return NOT_FOUND


def reduce(elements: Iterable[E], combine: Callable[[E, A], A], accumulator: A) -> A:
    """
    Fold elements from left to right.

    combine is called as combine(element, accumulator), element first,
    which matters for non-commutative folds:

        reduce("abc", lambda ch, acc: ch + acc, "")  # "cba"
    """
    for element in elements:
        accumulator = combine(element, accumulator)
    return accumulator
