"""Validity intervals for slowly-changing entities."""

from __future__ import annotations

from dataclasses import replace
from datetime import timedelta
from typing import Callable, Hashable, Iterable, TypeVar

from conform.common.deterministic import group_by, nulls_first, nulls_first_key, stable_sorted

T = TypeVar("T")

ONE_DAY = timedelta(days=1)


def resolve_validity(
    records: Iterable[T],
    *,
    key: Callable[[T], Hashable | None],
    start: Callable[[T], object],
    end_field: str = "end_date",
) -> list[T]:
    """Close each version the day before its successor starts.

    Versions are grouped by natural key and ordered by start date ascending
    (an unknown start sorts first). The latest version of every key stays
    open-ended. Records are expected to be deduplicated on (key, start).
    """
    grouped, _dropped = group_by(records, key)
    resolved: list[T] = []
    for natural_key in stable_sorted(grouped, key=nulls_first_key):
        history = stable_sorted(grouped[natural_key], key=lambda record: nulls_first(start(record)))
        for current, following in zip(history, history[1:]):
            next_start = start(following)
            end = next_start - ONE_DAY if next_start is not None else None
            resolved.append(replace(current, **{end_field: end}))
        resolved.append(replace(history[-1], **{end_field: None}))
    return resolved


def is_current(record, end_field: str = "end_date") -> bool:
    return getattr(record, end_field) is None
