"""Helpers for deterministic grouping and ordering."""

from __future__ import annotations

from collections import defaultdict
from typing import Callable, Hashable, Iterable, TypeVar

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)


def stable_sorted(items: Iterable[T], key: Callable[[T], object]) -> list[T]:
    return sorted(items, key=key)


def group_by(items: Iterable[T], key: Callable[[T], K | None]) -> tuple[dict[K, list[T]], int]:
    """Group items by key, returning the groups and the count of items with a null key."""
    grouped: dict[K, list[T]] = defaultdict(list)
    dropped = 0
    for item in items:
        value = key(item)
        if value is None:
            dropped += 1
            continue
        grouped[value].append(item)
    return dict(grouped), dropped


def nulls_first(value: object) -> tuple[bool, object]:
    # None cannot be compared with dates or ints; order it ahead of any value.
    return (value is not None, value if value is not None else 0)


def nulls_first_key(value: object) -> object:
    if isinstance(value, tuple):
        return tuple(nulls_first(part) for part in value)
    return nulls_first(value)
