"""Numeric reconciliation of sales measures."""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import ROUND_HALF_EVEN, Decimal
from typing import Iterable

from conform.common.models import CrmSalesLine

CENTS = Decimal("0.01")


@dataclass(frozen=True)
class Measures:
    quantity: int | None
    price: Decimal | None
    amount: Decimal | None


@dataclass(frozen=True)
class ReconcileResult:
    records: list[CrmSalesLine]
    amounts_recomputed: int
    prices_derived: int


def reconcile_measures(quantity: int | None, price: Decimal | None, amount: Decimal | None) -> Measures:
    """Make amount, quantity and price agree: amount == quantity * abs(price).

    Quantity is trusted as delivered. Whenever a price is present, including
    zero, the amount is recomputed from it when missing, nonpositive or
    inconsistent. A missing or nonpositive price is then derived from the
    amount and rounded to cents, after which the amount is realigned to the
    derived price.
    """
    if quantity is not None and price is not None:
        expected = quantity * abs(price)
        if amount is None or amount <= 0 or amount != expected:
            amount = expected
    elif amount is not None and amount <= 0:
        amount = None

    if price is None or price <= 0:
        if amount is None or not quantity:
            price = None
        else:
            price = (amount / quantity).quantize(CENTS, rounding=ROUND_HALF_EVEN)
            amount = quantity * abs(price)

    return Measures(quantity=quantity, price=price, amount=amount)


def reconcile_sales_line(line: CrmSalesLine) -> CrmSalesLine:
    measures = reconcile_measures(line.quantity, line.price, line.amount)
    return replace(line, amount=measures.amount, price=measures.price)


def reconcile_sales(lines: Iterable[CrmSalesLine]) -> ReconcileResult:
    reconciled: list[CrmSalesLine] = []
    amounts_recomputed = 0
    prices_derived = 0
    for line in lines:
        fixed = reconcile_sales_line(line)
        if fixed.amount != line.amount:
            amounts_recomputed += 1
        if fixed.price != line.price:
            prices_derived += 1
        reconciled.append(fixed)
    return ReconcileResult(
        records=reconciled,
        amounts_recomputed=amounts_recomputed,
        prices_derived=prices_derived,
    )
