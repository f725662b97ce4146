"""Controlled vocabularies and natural-key cleanup for CRM/ERP codes."""

from __future__ import annotations

from conform.common.coerce import clean_str
from conform.common.constants import NOT_AVAILABLE

GENDER_CODES = {
    "F": "Female",
    "FEMALE": "Female",
    "M": "Male",
    "MALE": "Male",
}
MARITAL_STATUS_CODES = {
    "S": "Single",
    "M": "Married",
}
PRODUCT_LINE_CODES = {
    "M": "Mountain",
    "R": "Road",
    "S": "Other Sales",
    "T": "Touring",
}
COUNTRY_CODES = {
    "DE": "Germany",
    "US": "United States",
    "USA": "United States",
}
CUSTOMER_REF_PREFIXES = ("NAS",)
CUSTOMER_REF_SEPARATORS = ("-",)


def map_code(value: object, table: dict[str, str]) -> str:
    cleaned = clean_str(value)
    if cleaned is None:
        return NOT_AVAILABLE
    return table.get(cleaned.upper(), NOT_AVAILABLE)


def normalise_country(value: object) -> str:
    cleaned = clean_str(value)
    if cleaned is None:
        return NOT_AVAILABLE
    # Unknown values are already country names and pass through trimmed.
    return COUNTRY_CODES.get(cleaned.upper(), cleaned)


def clean_customer_ref(value: object) -> str | None:
    cleaned = clean_str(value)
    if cleaned is None:
        return None
    for separator in CUSTOMER_REF_SEPARATORS:
        cleaned = cleaned.replace(separator, "")
    for prefix in CUSTOMER_REF_PREFIXES:
        if cleaned.startswith(prefix):
            cleaned = cleaned[len(prefix) :]
    return cleaned or None


def split_product_key(value: object) -> tuple[str | None, str | None]:
    """Split a raw CRM product key into (category_id, product_number).

    ``CO-RF-FR-R92B-58`` carries the ERP category ``CO_RF`` in its first five
    characters and the product number after the sixth.
    """
    cleaned = clean_str(value)
    if cleaned is None:
        return None, None
    category_id = cleaned[:5].replace("-", "_") or None
    product_number = cleaned[6:] or None
    return category_id, product_number
