"""Deterministic dense surrogate key assignment."""

from __future__ import annotations

from typing import Callable, Iterable, TypeVar

from conform.common.deterministic import stable_sorted
from conform.common.errors import ContractError

T = TypeVar("T")


def assign_surrogate_keys(entities: Iterable[T], *, order_key: Callable[[T], object]) -> list[tuple[int, T]]:
    """Number entities 1..N in the given total order.

    Keys are only meaningful within one run: inserting or removing an entity
    renumbers everything sorted after it.
    """
    ordered = stable_sorted(entities, key=order_key)
    sort_values = [order_key(entity) for entity in ordered]
    for previous, current in zip(sort_values, sort_values[1:]):
        if previous == current:
            raise ContractError(f"Surrogate key order is not total; duplicate sort value {current!r}")
    return [(position, entity) for position, entity in enumerate(ordered, start=1)]


def build_key_index(keyed: Iterable[tuple[int, T]], *, natural_key: Callable[[T], object]) -> dict[object, int]:
    index: dict[object, int] = {}
    for surrogate, entity in keyed:
        value = natural_key(entity)
        if value in index:
            raise ContractError(f"Natural key {value!r} maps to more than one surrogate key")
        index[value] = surrogate
    return index
