from dataclasses import dataclass
from datetime import date, timedelta

from conform.common.models import CrmProduct
from conform.pipeline.temporal import is_current, resolve_validity


def _product(product_number, start_date, product_id=1):
    return CrmProduct(
        product_id=product_id,
        category_id="AC_HE",
        product_number=product_number,
        product_name="Sport-100 Helmet- Red",
        cost=13,
        product_line="Other Sales",
        start_date=start_date,
    )


def _resolve(records):
    return resolve_validity(
        records,
        key=lambda record: record.product_number,
        start=lambda record: record.start_date,
    )


def test_two_versions_close_the_first_the_day_before_the_second():
    resolved = _resolve([_product("HL-U509-R", date(2022, 1, 1)), _product("HL-U509-R", date(2021, 1, 1))])

    assert [(record.start_date, record.end_date) for record in resolved] == [
        (date(2021, 1, 1), date(2021, 12, 31)),
        (date(2022, 1, 1), None),
    ]


def test_history_is_gapless_with_one_open_interval_per_key():
    starts = [date(2011, 7, 1), date(2013, 7, 1), date(2012, 7, 1), date(2020, 2, 29)]
    records = [_product("HL-U509-R", start) for start in starts] + [_product("FR-R92B-58", date(2003, 7, 1))]

    resolved = _resolve(records)
    helmet = [record for record in resolved if record.product_number == "HL-U509-R"]

    assert sum(1 for record in helmet if is_current(record)) == 1
    assert is_current(helmet[-1])
    for current, following in zip(helmet, helmet[1:]):
        assert current.end_date == following.start_date - timedelta(days=1)
    frame = [record for record in resolved if record.product_number == "FR-R92B-58"]
    assert len(frame) == 1 and frame[0].end_date is None


def test_unknown_start_sorts_first():
    resolved = _resolve([_product("X", date(2015, 1, 1)), _product("X", None)])

    assert resolved[0].start_date is None
    assert resolved[0].end_date == date(2014, 12, 31)
    assert resolved[1].end_date is None


def test_raw_end_dates_are_replaced():
    stale = CrmProduct(
        product_id=212,
        category_id="AC_HE",
        product_number="HL-U509-R",
        product_name="Helmet",
        cost=12,
        product_line="Other Sales",
        start_date=date(2011, 7, 1),
        end_date=date(2007, 12, 28),
    )

    assert _resolve([stale])[0].end_date is None


def test_end_date_comes_from_the_start_accessor():
    @dataclass(frozen=True)
    class Tariff:
        code: str
        effective: date
        end_date: date | None = None

    resolved = resolve_validity(
        [Tariff("T1", date(2024, 3, 1)), Tariff("T1", date(2024, 1, 1))],
        key=lambda record: record.code,
        start=lambda record: record.effective,
    )

    assert [(record.effective, record.end_date) for record in resolved] == [
        (date(2024, 1, 1), date(2024, 2, 29)),
        (date(2024, 3, 1), None),
    ]
