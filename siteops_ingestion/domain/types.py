"""
siteops_ingestion.domain.types -- Pure frozen dataclasses for the mass upload.

ZERO I/O. Every transition over these values produces new instances; a
ParseResult is never mutated after construction.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any
from uuid import UUID


# =============================================================================
# Schema enums
# =============================================================================


class FieldType(str, Enum):
    """How a raw text cell is coerced."""

    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    TIME = "time"
    BOOLEAN = "boolean"
    ENUM = "enum"
    LOOKUP = "lookup"  # Human-readable reference, resolved server-side


class ContextRequirement(str, Enum):
    """Context a table needs before rows can be materialized."""

    SITE = "site_id"
    USER = "user_id"


class ErrorKind(str, Enum):
    """Category of a field-level validation problem."""

    REQUIRED = "required"
    TYPE = "type"
    FORMAT = "format"
    ENUM = "enum"
    LOOKUP = "lookup"  # Only produced by the server-side revalidator


class RowStatus(str, Enum):
    """Per-row validation outcome. Skipping a row never changes it."""

    VALID = "valid"
    WARNING = "warning"
    ERROR = "error"


class ImportStatus(str, Enum):
    """Wizard-level progress state."""

    IDLE = "idle"
    VALIDATING = "validating"
    IMPORTING = "importing"
    COMPLETED = "completed"
    ERROR = "error"


# =============================================================================
# Table schema
# =============================================================================


@dataclass(frozen=True)
class LookupTarget:
    """Where a lookup field's human-readable value is resolved."""

    table: str
    match_field: str
    display_field: str | None = None
    alternate_fields: tuple[str, ...] = ()  # Also matched, e.g. phone
    site_scoped: bool = False
    filters: tuple[tuple[str, Any], ...] = ()  # Equality filters


@dataclass(frozen=True)
class FieldConfig:
    """One destination field and the source column it is read from."""

    target: str
    header: str
    field_type: FieldType
    required: bool = False
    enum_values: tuple[str, ...] = ()
    lookup: LookupTarget | None = None
    default: Any = None
    pattern: str | None = None
    description: str = ""


@dataclass(frozen=True)
class TableConfig:
    """Import schema of one destination entity."""

    name: str
    display_name: str
    description: str = ""
    required_context: tuple[ContextRequirement, ...] = ()
    upsert_key: tuple[str, ...] = ()
    fields: tuple[FieldConfig, ...] = ()
    example_row: Mapping[str, str] | None = None

    @property
    def headers(self) -> tuple[str, ...]:
        return tuple(f.header for f in self.fields)

    @property
    def requires_site(self) -> bool:
        return ContextRequirement.SITE in self.required_context

    @property
    def is_importable(self) -> bool:
        return bool(self.fields)

    def field_by_header(self, header: str) -> FieldConfig | None:
        """Case-insensitive, whitespace-trimmed header match."""
        wanted = header.strip().lower()
        for f in self.fields:
            if f.header.lower() == wanted:
                return f
        return None

    def field_by_target(self, target: str) -> FieldConfig | None:
        for f in self.fields:
            if f.target == target:
                return f
        return None


# =============================================================================
# Parsing results
# =============================================================================


@dataclass(frozen=True)
class ValidationError:
    """A field-level problem found in one row."""

    row_number: int
    field: str  # Destination field, or the source header for unknown columns
    header: str
    value: str
    kind: ErrorKind
    message: str
    suggestion: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "rowNumber": self.row_number,
            "field": self.field,
            "header": self.header,
            "value": self.value,
            "kind": self.kind.value,
            "message": self.message,
        }
        if self.suggestion is not None:
            data["suggestion"] = self.suggestion
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ValidationError:
        return cls(
            row_number=int(data["rowNumber"]),
            field=data["field"],
            header=data.get("header", data["field"]),
            value=data.get("value", ""),
            kind=ErrorKind(data["kind"]),
            message=data["message"],
            suggestion=data.get("suggestion"),
        )


@dataclass(frozen=True)
class ParsedRow:
    """One data row: raw text, coerced values, and its validation outcome."""

    row_number: int  # 1-based physical line; the header is line 1
    raw: dict[str, str]
    values: dict[str, Any]
    errors: tuple[ValidationError, ...] = ()
    warnings: tuple[ValidationError, ...] = ()
    status: RowStatus = RowStatus.VALID
    is_sample_row: bool = False
    is_skipped: bool = False
    edited_fields: tuple[str, ...] = ()  # Headers edited since last validation

    @property
    def is_stale(self) -> bool:
        """True when a manual edit has not been revalidated yet."""
        return bool(self.edited_fields)

    @property
    def is_importable(self) -> bool:
        return not self.is_skipped and self.status in (
            RowStatus.VALID,
            RowStatus.WARNING,
        )


def status_for(
    errors: tuple[ValidationError, ...], warnings: tuple[ValidationError, ...]
) -> RowStatus:
    if errors:
        return RowStatus.ERROR
    if warnings:
        return RowStatus.WARNING
    return RowStatus.VALID


@dataclass(frozen=True)
class ParseResult:
    """
    The parsed file. Counts cover non-skipped rows only.

    Always build through ``from_rows`` so the counts match the rows.
    """

    rows: tuple[ParsedRow, ...] = ()
    headers: tuple[str, ...] = ()
    total_rows: int = 0
    valid_rows: int = 0
    warning_rows: int = 0
    error_rows: int = 0

    @classmethod
    def from_rows(
        cls, rows: Iterable[ParsedRow], headers: Iterable[str] = ()
    ) -> ParseResult:
        rows = tuple(rows)
        active = [r for r in rows if not r.is_skipped]
        return cls(
            rows=rows,
            headers=tuple(headers),
            total_rows=len(rows),
            valid_rows=sum(1 for r in active if r.status == RowStatus.VALID),
            warning_rows=sum(1 for r in active if r.status == RowStatus.WARNING),
            error_rows=sum(1 for r in active if r.status == RowStatus.ERROR),
        )

    @property
    def is_empty(self) -> bool:
        return not self.rows

    @property
    def sample_rows(self) -> int:
        return sum(1 for r in self.rows if r.is_sample_row)

    @property
    def skipped_rows(self) -> int:
        return sum(1 for r in self.rows if r.is_skipped)

    def row(self, row_number: int) -> ParsedRow | None:
        for r in self.rows:
            if r.row_number == row_number:
                return r
        return None


# =============================================================================
# Import
# =============================================================================


@dataclass(frozen=True)
class ImportContext:
    """Who is importing, and for which site."""

    caller_id: UUID
    caller_name: str
    site_id: str | None = None


@dataclass(frozen=True)
class ImportProgress:
    status: ImportStatus = ImportStatus.IDLE
    current_row: int = 0
    total_rows: int = 0
    success_count: int = 0
    error_count: int = 0
    message: str | None = None


@dataclass(frozen=True)
class ImportSummary:
    total: int = 0
    inserted: int = 0
    updated: int = 0
    skipped: int = 0
    errors: int = 0

    @property
    def success_count(self) -> int:
        return self.inserted + self.updated


@dataclass(frozen=True)
class ImportRowError:
    row_number: int
    error: str


@dataclass(frozen=True)
class ImportResult:
    """
    Outcome of one import request.

    ``errors`` may be capped for display; ``failed_row_numbers`` always
    lists every row that was not written.
    """

    success: bool
    summary: ImportSummary
    errors: tuple[ImportRowError, ...] = ()
    failed_row_numbers: tuple[int, ...] = ()
    import_log_id: UUID | None = None
