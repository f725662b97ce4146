"""Table-driven normalisation of raw CRM/ERP records into typed records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Iterable, Mapping

from conform.common.coerce import clean_str, coerce_decimal, coerce_int, parse_int_date, parse_iso_date
from conform.common.errors import ConfigError, FieldValidationError
from conform.common.models import (
    CrmCustomer,
    CrmProduct,
    CrmSalesLine,
    ErpCustomerDemographics,
    ErpCustomerLocation,
    ErpProductCategory,
)
from conform.common.vocabulary import (
    GENDER_CODES,
    MARITAL_STATUS_CODES,
    PRODUCT_LINE_CODES,
    clean_customer_ref,
    map_code,
    normalise_country,
    split_product_key,
)

NormalizedRecord = (
    CrmCustomer
    | CrmProduct
    | CrmSalesLine
    | ErpCustomerDemographics
    | ErpCustomerLocation
    | ErpProductCategory
)


def _text(value: object, **_: Any) -> str | None:
    return clean_str(value)


def _integer(value: object, *, entity_type: str, field: str, **_: Any) -> int | None:
    return coerce_int(value, entity_type=entity_type, field=field)


def _measure(value: object, *, entity_type: str, field: str, **_: Any) -> Decimal | None:
    return coerce_decimal(value, entity_type=entity_type, field=field)


def _cost(value: object, *, entity_type: str, field: str, **_: Any) -> int:
    cost = coerce_int(value, entity_type=entity_type, field=field)
    return 0 if cost is None else cost


def _iso_date(value: object, *, entity_type: str, field: str, **_: Any) -> date | None:
    return parse_iso_date(value, entity_type=entity_type, field=field)


def _birthdate(value: object, *, entity_type: str, field: str, as_of: date | None) -> date | None:
    parsed = parse_iso_date(value, entity_type=entity_type, field=field)
    if parsed is not None and as_of is not None and parsed > as_of:
        return None
    return parsed


def _int_date(value: object, **_: Any) -> date | None:
    return parse_int_date(value)


def _gender(value: object, **_: Any) -> str:
    return map_code(value, GENDER_CODES)


def _marital_status(value: object, **_: Any) -> str:
    return map_code(value, MARITAL_STATUS_CODES)


def _product_line(value: object, **_: Any) -> str:
    return map_code(value, PRODUCT_LINE_CODES)


def _country(value: object, **_: Any) -> str:
    return normalise_country(value)


def _customer_ref(value: object, **_: Any) -> str | None:
    return clean_customer_ref(value)


def _category_id(value: object, **_: Any) -> str | None:
    return split_product_key(value)[0]


def _product_number(value: object, **_: Any) -> str | None:
    return split_product_key(value)[1]


@dataclass(frozen=True)
class FieldRule:
    source: str
    convert: Callable[..., object]
    fallback: object = None

    def apply(self, raw: Mapping[str, object], entity_type: str, as_of: date | None) -> object:
        return self.convert(raw.get(self.source), entity_type=entity_type, field=self.source, as_of=as_of)


@dataclass(frozen=True)
class FieldIssue:
    entity_type: str
    field: str
    value: object
    row_index: int


@dataclass(frozen=True)
class NormalizationResult:
    entity_type: str
    records: list[NormalizedRecord]
    issues: list[FieldIssue]


RULE_TABLES: dict[str, tuple[type, dict[str, FieldRule]]] = {
    "crm_customers": (
        CrmCustomer,
        {
            "customer_id": FieldRule("cst_id", _integer),
            "customer_number": FieldRule("cst_key", _text),
            "first_name": FieldRule("cst_firstname", _text),
            "last_name": FieldRule("cst_lastname", _text),
            "marital_status": FieldRule("cst_marital_status", _marital_status),
            "gender": FieldRule("cst_gndr", _gender),
            "create_date": FieldRule("cst_create_date", _iso_date),
        },
    ),
    "crm_products": (
        CrmProduct,
        {
            "product_id": FieldRule("prd_id", _integer),
            "category_id": FieldRule("prd_key", _category_id),
            "product_number": FieldRule("prd_key", _product_number),
            "product_name": FieldRule("prd_nm", _text),
            "cost": FieldRule("prd_cost", _cost, fallback=0),
            "product_line": FieldRule("prd_line", _product_line),
            "start_date": FieldRule("prd_start_dt", _iso_date),
        },
    ),
    "crm_sales": (
        CrmSalesLine,
        {
            "order_number": FieldRule("sls_ord_num", _text),
            "product_number": FieldRule("sls_prd_key", _text),
            "customer_id": FieldRule("sls_cust_id", _integer),
            "order_date": FieldRule("sls_order_dt", _int_date),
            "ship_date": FieldRule("sls_ship_dt", _int_date),
            "due_date": FieldRule("sls_due_dt", _int_date),
            "amount": FieldRule("sls_sales", _measure),
            "quantity": FieldRule("sls_quantity", _integer),
            "price": FieldRule("sls_price", _measure),
        },
    ),
    "erp_customer_demographics": (
        ErpCustomerDemographics,
        {
            "customer_ref": FieldRule("cid", _customer_ref),
            "birthdate": FieldRule("bdate", _birthdate),
            "gender": FieldRule("gen", _gender),
        },
    ),
    "erp_customer_locations": (
        ErpCustomerLocation,
        {
            "customer_ref": FieldRule("cid", _customer_ref),
            "country": FieldRule("cntry", _country),
        },
    ),
    "erp_product_categories": (
        ErpProductCategory,
        {
            "category_id": FieldRule("id", _text),
            "category": FieldRule("cat", _text),
            "subcategory": FieldRule("subcat", _text),
            "maintenance": FieldRule("maintenance", _text),
        },
    ),
}


def _rule_table(entity_type: str) -> tuple[type, dict[str, FieldRule]]:
    try:
        return RULE_TABLES[entity_type]
    except KeyError as exc:
        raise ConfigError(f"No normalisation rules for entity type: {entity_type}") from exc


def normalize_record(entity_type: str, raw: Mapping[str, object], *, as_of: date | None = None) -> NormalizedRecord:
    """Normalise one raw record, raising FieldValidationError on the first uncoercible value."""
    model, rules = _rule_table(entity_type)
    values = {name: rule.apply(raw, entity_type, as_of) for name, rule in rules.items()}
    return model(**values)


def normalize_records(
    entity_type: str,
    rows: Iterable[Mapping[str, object]],
    *,
    as_of: date | None = None,
) -> NormalizationResult:
    """Normalise a batch, substituting the rule fallback for values that cannot be coerced."""
    model, rules = _rule_table(entity_type)
    records: list[NormalizedRecord] = []
    issues: list[FieldIssue] = []
    for idx, raw in enumerate(rows):
        values = {}
        for name, rule in rules.items():
            try:
                values[name] = rule.apply(raw, entity_type, as_of)
            except FieldValidationError as exc:
                issues.append(FieldIssue(entity_type=entity_type, field=exc.field, value=exc.value, row_index=idx))
                values[name] = rule.fallback
        records.append(model(**values))
    return NormalizationResult(entity_type=entity_type, records=records, issues=issues)
