import pytest

from conform.common.vocabulary import (
    GENDER_CODES,
    MARITAL_STATUS_CODES,
    PRODUCT_LINE_CODES,
    clean_customer_ref,
    map_code,
    normalise_country,
    split_product_key,
)


def test_country_codes_map_to_names():
    assert normalise_country("DE") == "Germany"
    assert normalise_country("USA") == "United States"
    assert normalise_country(" US ") == "United States"
    assert normalise_country("") == "n/a"
    assert normalise_country(None) == "n/a"
    assert normalise_country(" Australia ") == "Australia"
    assert normalise_country("de") == "Germany"


@pytest.mark.parametrize(
    ("value", "expected"),
    [("F", "Female"), ("female", "Female"), (" m ", "Male"), ("MALE", "Male"), ("X", "n/a"), ("", "n/a"), (None, "n/a")],
)
def test_gender_codes(value, expected):
    assert map_code(value, GENDER_CODES) == expected


def test_marital_status_and_product_line_codes():
    assert map_code("s", MARITAL_STATUS_CODES) == "Single"
    assert map_code("M", MARITAL_STATUS_CODES) == "Married"
    assert map_code("D", MARITAL_STATUS_CODES) == "n/a"
    assert [map_code(code, PRODUCT_LINE_CODES) for code in ("M", "r ", "S", "T", "Z")] == [
        "Mountain",
        "Road",
        "Other Sales",
        "Touring",
        "n/a",
    ]


def test_clean_customer_ref_strips_prefix_and_separators():
    assert clean_customer_ref("NASAW00011000") == "AW00011000"
    assert clean_customer_ref("AW-00011000") == "AW00011000"
    assert clean_customer_ref(" AW00011000 ") == "AW00011000"
    assert clean_customer_ref("") is None


def test_split_product_key():
    assert split_product_key("CO-RF-FR-R92B-58") == ("CO_RF", "FR-R92B-58")
    assert split_product_key(" AC-HE-HL-U509-R ") == ("AC_HE", "HL-U509-R")
    assert split_product_key(None) == (None, None)
