"""Collapse multiple source versions of a natural key into one canonical record."""

from __future__ import annotations

from dataclasses import astuple, dataclass
from typing import Callable, Generic, Hashable, Iterable, TypeVar

from conform.common.deterministic import group_by, nulls_first, nulls_first_key, stable_sorted

T = TypeVar("T")


@dataclass(frozen=True)
class DedupResult(Generic[T]):
    records: list[T]
    null_keys_dropped: int
    duplicates_collapsed: int


def _content_key(record) -> tuple:
    # Equal recency markers are broken by record content, never by input order.
    return tuple(nulls_first(value) for value in astuple(record))


def select_canonical(versions: Iterable[T], recency: Callable[[T], object] | None = None) -> T:
    """Return the version with the greatest recency marker.

    Ties (including entities without any recency marker) resolve to the version
    whose field values sort lowest, so the choice is a function of content only.
    """
    candidates = list(versions)
    if not candidates:
        raise ValueError("select_canonical needs at least one version")
    if recency is None:
        return min(candidates, key=_content_key)
    newest = max(nulls_first(recency(record)) for record in candidates)
    tied = [record for record in candidates if nulls_first(recency(record)) == newest]
    return min(tied, key=_content_key)


def deduplicate(
    records: Iterable[T],
    *,
    key: Callable[[T], Hashable | None],
    recency: Callable[[T], object] | None = None,
) -> DedupResult[T]:
    grouped, dropped = group_by(records, key)
    canonical: list[T] = []
    collapsed = 0
    for natural_key in stable_sorted(grouped, key=nulls_first_key):
        versions = grouped[natural_key]
        collapsed += len(versions) - 1
        canonical.append(select_canonical(versions, recency))
    return DedupResult(records=canonical, null_keys_dropped=dropped, duplicates_collapsed=collapsed)

