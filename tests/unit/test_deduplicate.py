from datetime import date

import pytest

from conform.common.models import CrmCustomer, ErpCustomerLocation
from conform.pipeline.deduplicate import deduplicate, select_canonical


def _customer(customer_id, create_date, last_name="Torres"):
    return CrmCustomer(
        customer_id=customer_id,
        customer_number=f"AW{customer_id}",
        first_name="Ruben",
        last_name=last_name,
        marital_status="Married",
        gender="Male",
        create_date=create_date,
    )


def _by_id(record):
    return record.customer_id


def _by_create_date(record):
    return record.create_date


def test_keeps_most_recent_customer_version():
    older = _customer(1, date(2023, 1, 1), last_name="Old")
    newer = _customer(1, date(2023, 6, 1), last_name="New")

    result = deduplicate([older, newer], key=_by_id, recency=_by_create_date)

    assert result.records == [newer]
    assert result.duplicates_collapsed == 1


def test_recency_of_survivor_is_max_of_versions():
    versions = [
        _customer(7, date(2022, 3, 1)),
        _customer(7, None),
        _customer(7, date(2024, 2, 29)),
        _customer(8, date(2021, 1, 1)),
        _customer(8, date(2020, 1, 1)),
    ]
    result = deduplicate(versions, key=_by_id, recency=_by_create_date)

    by_key = {record.customer_id: record for record in result.records}
    assert by_key[7].create_date == date(2024, 2, 29)
    assert by_key[8].create_date == date(2021, 1, 1)
    assert [record.customer_id for record in result.records] == [7, 8]


def test_drops_records_without_natural_key():
    result = deduplicate([_customer(None, date(2023, 1, 1)), _customer(2, date(2023, 1, 1))], key=_by_id, recency=_by_create_date)

    assert [record.customer_id for record in result.records] == [2]
    assert result.null_keys_dropped == 1


def test_tie_break_does_not_depend_on_input_order():
    first = _customer(3, date(2023, 6, 1), last_name="Alpha")
    second = _customer(3, date(2023, 6, 1), last_name="Beta")

    forward = deduplicate([first, second], key=_by_id, recency=_by_create_date)
    backward = deduplicate([second, first], key=_by_id, recency=_by_create_date)

    assert forward.records == backward.records == [first]


def test_entities_without_recency_collapse_deterministically():
    rows = [ErpCustomerLocation("AW1", "Germany"), ErpCustomerLocation("AW1", "France")]

    assert select_canonical(rows) == select_canonical(list(reversed(rows))) == ErpCustomerLocation("AW1", "France")


def test_select_canonical_requires_versions():
    with pytest.raises(ValueError):
        select_canonical([])
