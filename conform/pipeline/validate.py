"""Contract validation of the currently published model."""

from __future__ import annotations

from collections import Counter
from pathlib import Path

from conform.common.errors import ContractError, StageError
from conform.common.fs import read_csv, read_json, write_json
from conform.pipeline.export import DATASET_HEADERS
from conform.pipeline.publish import current_snapshot_dir, model_root


def _read_dataset(path: Path) -> tuple[list[str], list[dict]]:
    if not path.exists():
        raise StageError(f"Missing published dataset: {path}")
    return read_csv(path)


def _surrogate_key_errors(rows: list[dict], column: str, dataset: str) -> list[str]:
    errors: list[str] = []
    try:
        keys = [int(row[column]) for row in rows]
    except (KeyError, ValueError):
        return [f"{dataset.upper()}_SURROGATE_KEY_NOT_INTEGER"]
    duplicates = [key for key, count in Counter(keys).items() if count > 1]
    if duplicates:
        errors.append(f"{dataset.upper()}_SURROGATE_KEY_DUPLICATES")
    if set(keys) != set(range(1, len(rows) + 1)):
        errors.append(f"{dataset.upper()}_SURROGATE_KEY_GAPS")
    return errors


def _dangling_keys(fact_rows: list[dict], column: str, known: set[str]) -> int:
    return sum(1 for row in fact_rows if row.get(column) and row[column] not in known)


def _fill_rates(header: list[str], rows: list[dict]) -> list[dict]:
    total = len(rows)
    stats = []
    for column in header:
        filled = sum(1 for row in rows if row.get(column, "") not in ("", None))
        fill_percent = 0.0 if total == 0 else round((filled / total) * 100, 2)
        stats.append({"column": column, "filled": filled, "null": total - filled, "fill_percent": fill_percent})
    return stats


def validate_published_model(data_dir: Path, output_names: dict[str, str]) -> Path:
    snapshot = current_snapshot_dir(data_dir)
    if snapshot is None:
        raise StageError(f"No published model under {model_root(data_dir)}")
    manifest = read_json(snapshot / "manifest.json")

    datasets: dict[str, tuple[list[str], list[dict]]] = {
        name: _read_dataset(snapshot / output_names[name]) for name in DATASET_HEADERS
    }

    errors: list[str] = []
    warnings: list[str] = []

    for name, expected_header in DATASET_HEADERS.items():
        if datasets[name][0] != expected_header:
            errors.append(f"{name.upper()}_HEADER_ORDER_MISMATCH")
    if errors:
        raise ContractError(";".join(errors))

    customer_rows = datasets["customer_dimension"][1]
    product_rows = datasets["product_dimension"][1]
    sales_rows = datasets["sales_fact"][1]

    errors.extend(_surrogate_key_errors(customer_rows, "customer_key", "customer_dimension"))
    errors.extend(_surrogate_key_errors(product_rows, "product_key", "product_dimension"))

    customer_keys = {row["customer_key"] for row in customer_rows}
    product_keys = {row["product_key"] for row in product_rows}
    dangling_customers = _dangling_keys(sales_rows, "customer_key", customer_keys)
    dangling_products = _dangling_keys(sales_rows, "product_key", product_keys)
    if dangling_customers:
        errors.append("SALES_FACT_DANGLING_CUSTOMER_KEY")
    if dangling_products:
        errors.append("SALES_FACT_DANGLING_PRODUCT_KEY")

    if errors:
        raise ContractError(";".join(errors))

    unmatched_customers = sum(1 for row in sales_rows if not row.get("customer_key"))
    unmatched_products = sum(1 for row in sales_rows if not row.get("product_key"))
    if unmatched_customers:
        warnings.append("SALES_FACT_UNMATCHED_CUSTOMERS")
    if unmatched_products:
        warnings.append("SALES_FACT_UNMATCHED_PRODUCTS")

    report_payload = {
        "run_id": manifest.get("run_id"),
        "run_date": manifest.get("run_date"),
        "counts": {name: len(rows) for name, (_header, rows) in datasets.items()},
        "referential_gaps": {
            "unmatched_customer_keys": unmatched_customers,
            "unmatched_product_keys": unmatched_products,
        },
        "fill": {name: _fill_rates(header, rows) for name, (header, rows) in datasets.items()},
        "warnings": warnings,
        "errors": errors,
    }
    report_path = model_root(data_dir) / "reports" / f"{manifest.get('run_id')}_validation.json"
    write_json(report_path, report_payload)
    return report_path
