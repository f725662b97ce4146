from datetime import date
from decimal import Decimal

import pytest

from conform.common.errors import ConfigError, FieldValidationError
from conform.common.models import CrmCustomer, CrmProduct, CrmSalesLine
from conform.pipeline.normalize import normalize_record, normalize_records


def test_normalize_customer_cleans_and_maps_codes():
    record = normalize_record(
        "crm_customers",
        {
            "cst_id": "11000",
            "cst_key": "AW00011000",
            "cst_firstname": " Jon ",
            "cst_lastname": "Yang ",
            "cst_marital_status": " m",
            "cst_gndr": "F",
            "cst_create_date": "2025-10-06",
        },
    )
    assert record == CrmCustomer(
        customer_id=11000,
        customer_number="AW00011000",
        first_name="Jon",
        last_name="Yang",
        marital_status="Married",
        gender="Female",
        create_date=date(2025, 10, 6),
    )


def test_normalize_product_splits_key_and_defaults_cost():
    record = normalize_record(
        "crm_products",
        {
            "prd_id": "210",
            "prd_key": "CO-RF-FR-R92B-58",
            "prd_nm": "HL Road Frame - Black- 58",
            "prd_cost": "",
            "prd_line": "R ",
            "prd_start_dt": "2003-07-01",
        },
    )
    assert isinstance(record, CrmProduct)
    assert record.category_id == "CO_RF"
    assert record.product_number == "FR-R92B-58"
    assert record.cost == 0
    assert record.product_line == "Road"
    assert record.end_date is None


def test_normalize_sales_line_validates_int_dates():
    record = normalize_record(
        "crm_sales",
        {
            "sls_ord_num": "SO43697",
            "sls_prd_key": "FR-R92B-58",
            "sls_cust_id": "11000",
            "sls_order_dt": "0",
            "sls_ship_dt": "20110105",
            "sls_due_dt": "2011011",
            "sls_sales": "3578",
            "sls_quantity": "1",
            "sls_price": "3578",
        },
    )
    assert isinstance(record, CrmSalesLine)
    assert record.order_date is None
    assert record.ship_date == date(2011, 1, 5)
    assert record.due_date is None
    assert record.amount == Decimal("3578")


def test_normalize_record_raises_for_uncoercible_value():
    with pytest.raises(FieldValidationError) as excinfo:
        normalize_record("crm_customers", {"cst_id": "eleven", "cst_create_date": "2025-10-06"})
    assert excinfo.value.entity_type == "crm_customers"
    assert excinfo.value.field == "cst_id"


def test_unknown_codes_never_raise():
    record = normalize_record("erp_customer_demographics", {"cid": "NASAW00011000", "bdate": "", "gen": "unknown"})
    assert record.gender == "n/a"
    assert record.customer_ref == "AW00011000"


def test_future_birthdates_are_dropped():
    record = normalize_record(
        "erp_customer_demographics",
        {"cid": "AW00011002", "bdate": "2199-01-01", "gen": "M"},
        as_of=date(2026, 1, 1),
    )
    assert record.birthdate is None


def test_normalize_records_substitutes_fallbacks_and_reports_issues():
    result = normalize_records(
        "crm_products",
        [
            {"prd_id": "1", "prd_key": "CO-RF-FR-1", "prd_cost": "cheap", "prd_start_dt": "2003-07-01"},
            {"prd_id": "x", "prd_key": "CO-RF-FR-2", "prd_cost": "5", "prd_start_dt": "July"},
        ],
    )
    assert [record.cost for record in result.records] == [0, 5]
    assert result.records[1].product_id is None
    assert result.records[1].start_date is None
    assert [(issue.row_index, issue.field) for issue in result.issues] == [
        (0, "prd_cost"),
        (1, "prd_id"),
        (1, "prd_start_dt"),
    ]


def test_unknown_entity_type_is_config_error():
    with pytest.raises(ConfigError):
        normalize_record("erp_suppliers", {})
