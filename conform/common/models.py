"""Data models used across the pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any


@dataclass(frozen=True)
class CrmCustomer:
    customer_id: int | None
    customer_number: str | None
    first_name: str | None
    last_name: str | None
    marital_status: str
    gender: str
    create_date: date | None


@dataclass(frozen=True)
class CrmProduct:
    product_id: int | None
    category_id: str | None
    product_number: str | None
    product_name: str | None
    cost: int
    product_line: str
    start_date: date | None
    end_date: date | None = None


@dataclass(frozen=True)
class CrmSalesLine:
    order_number: str | None
    product_number: str | None
    customer_id: int | None
    order_date: date | None
    ship_date: date | None
    due_date: date | None
    amount: Decimal | None
    quantity: int | None
    price: Decimal | None


@dataclass(frozen=True)
class ErpCustomerDemographics:
    customer_ref: str | None
    birthdate: date | None
    gender: str


@dataclass(frozen=True)
class ErpCustomerLocation:
    customer_ref: str | None
    country: str


@dataclass(frozen=True)
class ErpProductCategory:
    category_id: str | None
    category: str | None
    subcategory: str | None
    maintenance: str | None


@dataclass(frozen=True)
class CustomerDimRow:
    customer_key: int
    customer_id: int
    customer_number: str | None
    first_name: str | None
    last_name: str | None
    country: str | None
    marital_status: str
    gender: str
    birthdate: date | None
    create_date: date | None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ProductDimRow:
    product_key: int
    product_id: int | None
    product_number: str
    product_name: str | None
    category_id: str | None
    category: str | None
    subcategory: str | None
    maintenance: str | None
    cost: int
    product_line: str
    start_date: date | None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SalesFactRow:
    order_number: str | None
    product_key: int | None
    customer_key: int | None
    order_date: date | None
    shipping_date: date | None
    due_date: date | None
    sales_amount: Decimal | None
    quantity: int | None
    price: Decimal | None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ConformedModel:
    """One fully rebuilt dimensional model; never mutated after assembly."""

    customers: tuple[CustomerDimRow, ...]
    products: tuple[ProductDimRow, ...]
    sales: tuple[SalesFactRow, ...]
    quality: dict[str, Any] = field(default_factory=dict, compare=False)
