"""Small set-algebra helpers.

Each helper returns a new collection and leaves its arguments untouched.
"""

from collections.abc import Iterable, Set
from typing import TypeVar

T = TypeVar("T")


def union(a: Iterable[T], b: Iterable[T]) -> set[T]:
    result = set(a)
    result.update(b)
    return result


def intersection(a: Iterable[T], b: Iterable[T]) -> set[T]:
    """Return the elements of *b* that are also in *a*."""
    left = a if isinstance(a, Set) else set(a)
    return {item for item in b if item in left}


def difference(a: Iterable[T], b: Iterable[T]) -> set[T]:
    result = set(a)
    result.difference_update(b)
    return result


def flatten(iterables: Iterable[Iterable[T]]) -> list[T]:
    """Concatenate nested iterables one level deep, preserving order."""
    return [item for inner in iterables for item in inner]
