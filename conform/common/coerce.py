"""Coercion of loosely-typed source values into domain types."""

from __future__ import annotations

import re
from datetime import date
from decimal import Decimal, InvalidOperation

from conform.common.errors import FieldValidationError

_INT_DATE_RE = re.compile(r"^\d{8}$")
_ISO_DATE_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})(?:[ T].*)?$")


def clean_str(value: object) -> str | None:
    if value is None:
        return None
    cleaned = str(value).strip()
    if not cleaned:
        return None
    return cleaned


def coerce_decimal(value: object, *, entity_type: str, field: str) -> Decimal | None:
    cleaned = clean_str(value)
    if cleaned is None:
        return None
    try:
        parsed = Decimal(cleaned)
    except InvalidOperation as exc:
        raise FieldValidationError(entity_type, field, value) from exc
    if not parsed.is_finite():
        raise FieldValidationError(entity_type, field, value)
    return parsed


def coerce_int(value: object, *, entity_type: str, field: str) -> int | None:
    parsed = coerce_decimal(value, entity_type=entity_type, field=field)
    if parsed is None:
        return None
    if parsed != parsed.to_integral_value():
        raise FieldValidationError(entity_type, field, value)
    return int(parsed)


def parse_int_date(value: object) -> date | None:
    """Convert a YYYYMMDD integer date; anything malformed means unknown."""
    cleaned = clean_str(value)
    if cleaned is None or not _INT_DATE_RE.match(cleaned) or int(cleaned) == 0:
        return None
    try:
        return date(int(cleaned[:4]), int(cleaned[4:6]), int(cleaned[6:]))
    except ValueError:
        return None


def parse_iso_date(value: object, *, entity_type: str, field: str) -> date | None:
    if isinstance(value, date):
        return value
    cleaned = clean_str(value)
    if cleaned is None:
        return None
    match = _ISO_DATE_RE.match(cleaned)
    if not match:
        raise FieldValidationError(entity_type, field, value)
    try:
        return date.fromisoformat(match.group(1))
    except ValueError as exc:
        raise FieldValidationError(entity_type, field, value) from exc
