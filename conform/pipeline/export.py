"""Dataset CSV export for the published model."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from pathlib import Path

from conform.common.fs import write_csv
from conform.common.models import ConformedModel

CUSTOMER_HEADERS = [
    "customer_key",
    "customer_id",
    "customer_number",
    "first_name",
    "last_name",
    "country",
    "marital_status",
    "gender",
    "birthdate",
    "create_date",
]
PRODUCT_HEADERS = [
    "product_key",
    "product_id",
    "product_number",
    "product_name",
    "category_id",
    "category",
    "subcategory",
    "maintenance",
    "cost",
    "product_line",
    "start_date",
]
SALES_HEADERS = [
    "order_number",
    "product_key",
    "customer_key",
    "order_date",
    "shipping_date",
    "due_date",
    "sales_amount",
    "quantity",
    "price",
]
DATASET_HEADERS = {
    "customer_dimension": CUSTOMER_HEADERS,
    "product_dimension": PRODUCT_HEADERS,
    "sales_fact": SALES_HEADERS,
}


def _serialize_value(value: object) -> object:
    if value is None:
        return ""
    if isinstance(value, Decimal):
        return format(value.normalize(), "f")
    if isinstance(value, date):
        return value.isoformat()
    return value


def _serialize_row(row: dict, headers: list[str]) -> dict:
    return {key: _serialize_value(row.get(key)) for key in headers}


def write_model_datasets(model: ConformedModel, target_dir: Path, output_names: dict[str, str]) -> dict[str, Path]:
    datasets = {
        "customer_dimension": model.customers,
        "product_dimension": model.products,
        "sales_fact": model.sales,
    }
    written: dict[str, Path] = {}
    for name, rows in datasets.items():
        headers = DATASET_HEADERS[name]
        out_path = target_dir / output_names[name]
        write_csv(out_path, headers, (_serialize_row(row.to_dict(), headers) for row in rows))
        written[name] = out_path
    return written
