"""
Field validation: pure coercion of one raw text cell against its FieldConfig.

Never raises. Every problem is returned as a ``ValidationError`` value on the
``FieldResult`` so the row parser can fold it into the row status.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date
from functools import lru_cache
from typing import Any

from siteops_ingestion.domain.types import (
    ErrorKind,
    FieldConfig,
    FieldType,
    ValidationError,
)

TRUE_VALUES = frozenset({"true", "yes", "1", "y"})
FALSE_VALUES = frozenset({"false", "no", "0", "n"})

DATE_SUGGESTION = "Use format: 2024-01-15"
TIME_SUGGESTION = "Use format: 08:30 or 17:30"

MIN_YEAR = 1900
MAX_YEAR = 2100

_NUMBER_NOISE = re.compile(r"[,\s]")
_ISO_DATE = re.compile(r"^([0-9]{4})-([0-9]{2})-([0-9]{2})$")
_DAY_FIRST_DATE = re.compile(r"^([0-9]{2})[/-]([0-9]{2})[/-]([0-9]{4})$")
_TIME = re.compile(r"^([0-9]{1,2}):([0-9]{2})(?::([0-9]{2}))?$")


@dataclass(frozen=True)
class FieldResult:
    """Coerced value plus at most one error or warning."""

    value: Any = None
    error: ValidationError | None = None
    warning: ValidationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@lru_cache(maxsize=64)
def _compiled(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.ASCII)


def _issue(
    field: FieldConfig,
    row_number: int,
    value: str,
    kind: ErrorKind,
    message: str,
    suggestion: str | None = None,
) -> ValidationError:
    return ValidationError(
        row_number=row_number,
        field=field.target,
        header=field.header,
        value=value,
        kind=kind,
        message=message,
        suggestion=suggestion,
    )


# -----------------------------------------------------------------------------
# Per-type coercion
# -----------------------------------------------------------------------------


def parse_number(value: str) -> float | None:
    """Strip thousands separators and whitespace, then parse. None if invalid."""
    cleaned = _NUMBER_NOISE.sub("", value)
    # float() also accepts non-ASCII digits and underscores.
    if "_" in cleaned or not cleaned.isascii():
        return None
    try:
        number = float(cleaned)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number


def parse_date(value: str) -> str | None:
    """ISO, DD/MM/YYYY or DD-MM-YYYY to an ISO date string. None if invalid."""
    match = _ISO_DATE.match(value)
    if match:
        year, month, day = match.groups()
    else:
        match = _DAY_FIRST_DATE.match(value)
        if not match:
            return None
        # Mixed separators such as 15/01-2024 are not accepted.
        if value[2] != value[5]:
            return None
        day, month, year = match.groups()

    y, m, d = int(year), int(month), int(day)
    if not MIN_YEAR <= y <= MAX_YEAR:
        return None
    try:
        return date(y, m, d).isoformat()
    except ValueError:
        return None


def _validate_number(raw: str, field: FieldConfig, row_number: int) -> FieldResult:
    number = parse_number(raw)
    if number is None:
        return FieldResult(error=_issue(
            field, row_number, raw, ErrorKind.TYPE,
            f'"{field.header}" must be a valid number (got "{raw}")',
        ))
    return FieldResult(value=number)


def _validate_date(raw: str, field: FieldConfig, row_number: int) -> FieldResult:
    iso = parse_date(raw)
    if iso is None:
        return FieldResult(error=_issue(
            field, row_number, raw, ErrorKind.FORMAT,
            f'"{field.header}" must be a valid date in YYYY-MM-DD format (got "{raw}")',
            DATE_SUGGESTION,
        ))
    return FieldResult(value=iso)


def _validate_time(raw: str, field: FieldConfig, row_number: int) -> FieldResult:
    match = _TIME.match(raw)
    if not match:
        return FieldResult(error=_issue(
            field, row_number, raw, ErrorKind.FORMAT,
            f'"{field.header}" must be a valid time in HH:MM format (got "{raw}")',
            TIME_SUGGESTION,
        ))

    hour, minute = int(match.group(1)), int(match.group(2))
    second = int(match.group(3) or 0)
    if hour > 23 or minute > 59 or second > 59:
        return FieldResult(error=_issue(
            field, row_number, raw, ErrorKind.FORMAT,
            f'"{field.header}" contains invalid time values (got "{raw}")',
        ))
    return FieldResult(value=f"{hour:02d}:{minute:02d}:{second:02d}")


def _validate_boolean(raw: str, field: FieldConfig, row_number: int) -> FieldResult:
    lowered = raw.lower()
    if lowered in TRUE_VALUES:
        return FieldResult(value=True)
    if lowered in FALSE_VALUES:
        return FieldResult(value=False)
    return FieldResult(error=_issue(
        field, row_number, raw, ErrorKind.FORMAT,
        f'"{field.header}" must be TRUE or FALSE (got "{raw}")',
    ))


def _validate_enum(raw: str, field: FieldConfig, row_number: int) -> FieldResult:
    if not field.enum_values:
        return FieldResult(value=raw)

    lowered = raw.lower()
    for allowed in field.enum_values:
        if allowed.lower() == lowered:
            return FieldResult(value=allowed)

    return FieldResult(error=_issue(
        field, row_number, raw, ErrorKind.ENUM,
        f'"{field.header}" must be one of: '
        f'{", ".join(field.enum_values)} (got "{raw}")',
    ))


def _validate_string(raw: str, field: FieldConfig, row_number: int) -> FieldResult:
    # A pattern mismatch is reported but the raw value is kept.
    if field.pattern and not _compiled(field.pattern).search(raw):
        return FieldResult(value=raw, error=_issue(
            field, row_number, raw, ErrorKind.FORMAT,
            f'"{field.header}" has invalid format (got "{raw}")',
        ))
    return FieldResult(value=raw)


_VALIDATORS = {
    FieldType.NUMBER: _validate_number,
    FieldType.DATE: _validate_date,
    FieldType.TIME: _validate_time,
    FieldType.BOOLEAN: _validate_boolean,
    FieldType.ENUM: _validate_enum,
    # Lookups resolve server-side; only the optional pattern applies here.
    FieldType.LOOKUP: _validate_string,
    FieldType.STRING: _validate_string,
}


def validate_field(
    raw: str | None,
    field: FieldConfig,
    row_number: int,
) -> FieldResult:
    """
    Validate and coerce one cell. Pure function.

    Empty required cells are ``required`` errors; empty optional cells take
    the field default (or None) without any check.
    """
    text = (raw or "").strip()

    if not text:
        if field.required:
            return FieldResult(error=_issue(
                field, row_number, text, ErrorKind.REQUIRED,
                f'"{field.header}" is required',
            ))
        return FieldResult(value=field.default)

    return _VALIDATORS[field.field_type](text, field, row_number)
