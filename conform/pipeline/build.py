"""Build the conformed dimensional model from one raw batch."""

from __future__ import annotations

from collections import Counter
from datetime import date
from typing import Mapping, Sequence

from conform.common.coerce import clean_str
from conform.common.constants import ENTITY_TYPES
from conform.common.errors import StageError
from conform.common.logging import StageLog
from conform.common.models import ConformedModel, CrmSalesLine
from conform.pipeline.assemble import (
    assemble_sales_facts,
    build_customer_dimension,
    build_product_dimension,
    key_customers,
    key_products,
)
from conform.pipeline.deduplicate import DedupResult, deduplicate
from conform.pipeline.normalize import NormalizationResult, normalize_records
from conform.pipeline.reconcile import reconcile_sales
from conform.pipeline.temporal import is_current, resolve_validity

FACT_DATE_FIELDS = {
    "order_date": "sls_order_dt",
    "ship_date": "sls_ship_dt",
    "due_date": "sls_due_dt",
}

DEDUP_RULES = {
    "crm_customers": {
        "key": lambda record: record.customer_id,
        "recency": lambda record: record.create_date,
    },
    "crm_products": {
        "key": lambda record: None if record.product_number is None else (record.product_number, record.start_date),
        "recency": lambda record: record.product_id,
    },
    "erp_customer_demographics": {"key": lambda record: record.customer_ref},
    "erp_customer_locations": {"key": lambda record: record.customer_ref},
    "erp_product_categories": {"key": lambda record: record.category_id},
}


def _field_issue_counts(normalized: Mapping[str, NormalizationResult]) -> dict[str, dict[str, int]]:
    out: dict[str, dict[str, int]] = {}
    for entity, result in normalized.items():
        counts = Counter(issue.field for issue in result.issues)
        out[entity] = dict(sorted(counts.items()))
    return out


def _invalid_fact_dates(raw_rows: Sequence[Mapping[str, object]], lines: Sequence[CrmSalesLine]) -> dict[str, int]:
    invalid = {name: 0 for name in FACT_DATE_FIELDS}
    for raw, line in zip(raw_rows, lines):
        for name, source in FACT_DATE_FIELDS.items():
            if clean_str(raw.get(source)) is not None and getattr(line, name) is None:
                invalid[name] += 1
    return invalid


def conform_batch(
    batch: Mapping[str, Sequence[Mapping[str, object]]],
    *,
    as_of: date,
    stages: StageLog | None = None,
) -> ConformedModel:
    """Run normalise, deduplicate, temporal, reconcile, key and assembly stages.

    Pure apart from stage logging: the same batch and as-of date always give an
    equal model.
    """
    stages = stages or StageLog(None, None)
    missing = [entity for entity in ENTITY_TYPES if entity not in batch]
    if missing:
        raise StageError(f"Raw batch is missing entity types: {', '.join(missing)}")

    normalized: dict[str, NormalizationResult] = {}
    for entity in ENTITY_TYPES:
        with stages.stage("normalize", entity=entity, rows_in=len(batch[entity])) as counts:
            normalized[entity] = normalize_records(entity, batch[entity], as_of=as_of)
            counts["rows_out"] = len(normalized[entity].records)

    deduped: dict[str, DedupResult] = {}
    for entity, rules in DEDUP_RULES.items():
        records = normalized[entity].records
        with stages.stage("deduplicate", entity=entity, rows_in=len(records)) as counts:
            deduped[entity] = deduplicate(records, **rules)
            counts["rows_out"] = len(deduped[entity].records)

    product_versions = deduped["crm_products"].records
    with stages.stage("temporal", entity="crm_products", rows_in=len(product_versions)) as counts:
        products = resolve_validity(
            product_versions,
            key=lambda record: record.product_number,
            start=lambda record: record.start_date,
        )
        counts["rows_out"] = len(products)

    sales_lines = normalized["crm_sales"].records
    with stages.stage("reconcile", entity="crm_sales", rows_in=len(sales_lines)) as counts:
        reconciled = reconcile_sales(sales_lines)
        counts["rows_out"] = len(reconciled.records)

    customers_in = deduped["crm_customers"].records
    with stages.stage("surrogate_keys", entity="crm_customers", rows_in=len(customers_in)) as counts:
        keyed_customers = key_customers(customers_in)
        counts["rows_out"] = len(keyed_customers)

    with stages.stage("surrogate_keys", entity="crm_products", rows_in=len(products)) as counts:
        keyed_products = key_products(products)
        counts["rows_out"] = len(keyed_products)

    with stages.stage("assemble", entity="crm_customers", rows_in=len(keyed_customers)) as counts:
        customer_dim = build_customer_dimension(
            keyed_customers,
            deduped["erp_customer_demographics"].records,
            deduped["erp_customer_locations"].records,
        )
        counts["rows_out"] = len(customer_dim)

    with stages.stage("assemble", entity="crm_products", rows_in=len(keyed_products)) as counts:
        product_dim = build_product_dimension(keyed_products, deduped["erp_product_categories"].records)
        counts["rows_out"] = len(product_dim)

    with stages.stage("assemble", entity="crm_sales", rows_in=len(reconciled.records)) as counts:
        facts = assemble_sales_facts(reconciled.records, customer_dim, product_dim)
        counts["rows_out"] = len(facts.rows)

    quality = {
        "raw_rows": {entity: len(batch[entity]) for entity in ENTITY_TYPES},
        "field_issues": _field_issue_counts(normalized),
        "null_keys_dropped": {entity: result.null_keys_dropped for entity, result in deduped.items()},
        "duplicates_collapsed": {entity: result.duplicates_collapsed for entity, result in deduped.items()},
        "product_versions_closed": sum(1 for product in products if not is_current(product)),
        "amounts_recomputed": reconciled.amounts_recomputed,
        "prices_derived": reconciled.prices_derived,
        "invalid_fact_dates": _invalid_fact_dates(batch["crm_sales"], sales_lines),
        "unmatched_customer_refs": facts.unmatched_customers,
        "unmatched_product_refs": facts.unmatched_products,
        "rows_out": {
            "customer_dimension": len(customer_dim),
            "product_dimension": len(product_dim),
            "sales_fact": len(facts.rows),
        },
    }
    return ConformedModel(
        customers=tuple(customer_dim),
        products=tuple(product_dim),
        sales=tuple(facts.rows),
        quality=quality,
    )
