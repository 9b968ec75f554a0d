"""
Row parser: SourceTable -> ParseResult.

Per row: skip blanks and ``#`` comment lines, flag template sample rows, run
the field validator for every configured column, warn about columns the
schema does not know, and derive the row status. ZERO I/O.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from siteops_ingestion.adapters import CsvSourceAdapter, SourceTable
from siteops_ingestion.domain.types import (
    ErrorKind,
    ParsedRow,
    ParseResult,
    TableConfig,
    ValidationError,
    status_for,
)
from siteops_ingestion.validation.fields import validate_field
from siteops_kernel.logging_config import get_logger

logger = get_logger("ingestion.parser")

# Values shipped in templates and docs. A row containing one of these (or a
# cell starting with one) is almost certainly left-over example data.
SAMPLE_DATA_PATTERNS = (
    "Rajesh Kumar",
    "Suresh Singh",
    "Sample Name",
    "Sample",
    "sample@example.com",
    "test@example.com",
    "Sample Address",
    "Mason Team",
    "Helper Team",
    "Site Alpha",
    "Site Beta",
    "Block A",
    "Block B",
    "Chai Wala",
    "Tea Point",
    "Contract-001",
    "Contract-002",
    "REF001",
    "REF002",
)

_LOWER_PATTERNS = tuple(p.lower() for p in SAMPLE_DATA_PATTERNS)

COMMENT_PREFIX = "#"


def is_sample_row(raw: Mapping[str, str]) -> bool:
    """Case-insensitive exact-or-prefix match of any cell against the patterns."""
    for value in raw.values():
        text = (value or "").strip().lower()
        if text and text.startswith(_LOWER_PATTERNS):
            return True
    return False


def cell_value(raw: Mapping[str, str], header: str) -> str:
    """Case-insensitive header lookup."""
    if header in raw:
        return raw[header]
    wanted = header.lower()
    for key, value in raw.items():
        if key.strip().lower() == wanted:
            return value
    return ""


def unknown_column_warnings(
    raw: Mapping[str, str], table: TableConfig, row_number: int
) -> list[ValidationError]:
    return [
        ValidationError(
            row_number=row_number,
            field=header,
            header=header,
            value=value,
            kind=ErrorKind.FORMAT,
            message=f'Unknown column "{header}" will be ignored',
        )
        for header, value in raw.items()
        if header and table.field_by_header(header) is None
    ]


def build_row(
    raw: Mapping[str, str],
    table: TableConfig,
    row_number: int,
    *,
    sample: bool | None = None,
) -> ParsedRow:
    """Validate one raw row against the table. Shared by client and server."""
    errors: list[ValidationError] = []
    warnings: list[ValidationError] = []
    values: dict[str, Any] = {}

    for field in table.fields:
        result = validate_field(cell_value(raw, field.header), field, row_number)
        if result.error is not None:
            errors.append(result.error)
        if result.warning is not None:
            warnings.append(result.warning)
        values[field.target] = result.value

    warnings.extend(unknown_column_warnings(raw, table, row_number))

    errors_t, warnings_t = tuple(errors), tuple(warnings)
    return ParsedRow(
        row_number=row_number,
        raw=dict(raw),
        values=values,
        errors=errors_t,
        warnings=warnings_t,
        status=status_for(errors_t, warnings_t),
        is_sample_row=is_sample_row(raw) if sample is None else sample,
    )


def _is_comment(cells: tuple[str, ...]) -> bool:
    return bool(cells) and cells[0].strip().startswith(COMMENT_PREFIX)


def parse_source(source: SourceTable, table: TableConfig) -> ParseResult:
    """Parse an already-read SourceTable."""
    rows: list[ParsedRow] = []
    skipped = 0
    for line in source.lines:
        if line.is_blank or _is_comment(line.cells):
            skipped += 1
            continue
        rows.append(build_row(source.as_dict(line), table, line.line_number))

    result = ParseResult.from_rows(rows, source.headers)
    logger.info(
        "file_parsed",
        extra={
            "entity": table.name,
            "total_rows": result.total_rows,
            "valid_rows": result.valid_rows,
            "warning_rows": result.warning_rows,
            "error_rows": result.error_rows,
            "sample_rows": result.sample_rows,
            "ignored_lines": skipped,
        },
    )
    return result


def parse_text(text: str | bytes, table: TableConfig) -> ParseResult:
    """Parse delimited text with a mandatory header line."""
    return parse_source(CsvSourceAdapter().read(text), table)


# -----------------------------------------------------------------------------
# Header check
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class HeaderCheck:
    valid: bool
    missing_required: tuple[str, ...] = ()
    unknown: tuple[str, ...] = ()


def check_headers(headers: tuple[str, ...] | list[str], table: TableConfig) -> HeaderCheck:
    """Report required headers that are absent and headers the schema ignores."""
    provided = {h.strip().lower() for h in headers}
    missing = tuple(
        f.header for f in table.fields if f.required and f.header.lower() not in provided
    )
    unknown = tuple(h for h in headers if h and table.field_by_header(h) is None)
    return HeaderCheck(valid=not missing, missing_required=missing, unknown=unknown)
