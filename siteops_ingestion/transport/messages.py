"""
Request/response messages exchanged between the wizard and the server.

Each message has ``to_payload()`` (JSON-safe dict, camelCase keys as on the
wire) and ``from_payload()``. Row numbers travel with every row so answers
are merged by row number, never by position.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from siteops_ingestion.domain.types import (
    ImportContext,
    ImportResult,
    ImportRowError,
    ImportSummary,
    ParsedRow,
    RowStatus,
    ValidationError,
)


def context_to_payload(context: ImportContext) -> dict[str, Any]:
    return {
        "callerId": str(context.caller_id),
        "callerName": context.caller_name,
        "siteId": context.site_id,
    }


def context_from_payload(data: Mapping[str, Any]) -> ImportContext:
    return ImportContext(
        caller_id=UUID(str(data["callerId"])),
        caller_name=data.get("callerName", ""),
        site_id=data.get("siteId"),
    )


def row_to_payload(row: ParsedRow) -> dict[str, Any]:
    return {
        "rowNumber": row.row_number,
        "originalData": dict(row.raw),
        "transformedData": dict(row.values),
        "errors": [e.to_dict() for e in row.errors],
        "warnings": [w.to_dict() for w in row.warnings],
        "status": row.status.value,
        "isSampleRow": row.is_sample_row,
        "isSkipped": row.is_skipped,
    }


def row_from_payload(data: Mapping[str, Any]) -> ParsedRow:
    return ParsedRow(
        row_number=int(data["rowNumber"]),
        raw=dict(data.get("originalData") or {}),
        values=dict(data.get("transformedData") or {}),
        errors=tuple(ValidationError.from_dict(e) for e in data.get("errors", ())),
        warnings=tuple(ValidationError.from_dict(w) for w in data.get("warnings", ())),
        status=RowStatus(data.get("status", "valid")),
        is_sample_row=bool(data.get("isSampleRow", False)),
        is_skipped=bool(data.get("isSkipped", False)),
    )


# -----------------------------------------------------------------------------
# Revalidation
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class RawRow:
    """Raw text of one row as the user left it."""

    row_number: int
    data: dict[str, str]


@dataclass(frozen=True)
class RevalidateRequest:
    entity: str
    context: ImportContext
    rows: tuple[RawRow, ...]

    def to_payload(self) -> dict[str, Any]:
        return {
            "tableName": self.entity,
            "context": context_to_payload(self.context),
            "rows": [{"rowNumber": r.row_number, "data": dict(r.data)} for r in self.rows],
        }

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> RevalidateRequest:
        return cls(
            entity=data["tableName"],
            context=context_from_payload(data["context"]),
            rows=tuple(
                RawRow(row_number=int(r["rowNumber"]), data=dict(r.get("data") or {}))
                for r in data.get("rows", ())
            ),
        )


@dataclass(frozen=True)
class RevalidateResponse:
    success: bool
    rows: tuple[ParsedRow, ...] = ()
    lookup_errors: tuple[ValidationError, ...] = ()
    error: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "parsedRows": [row_to_payload(r) for r in self.rows],
            "lookupErrors": [e.to_dict() for e in self.lookup_errors],
            "error": self.error,
        }

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> RevalidateResponse:
        return cls(
            success=bool(data.get("success", False)),
            rows=tuple(row_from_payload(r) for r in data.get("parsedRows", ())),
            lookup_errors=tuple(
                ValidationError.from_dict(e) for e in data.get("lookupErrors", ())
            ),
            error=data.get("error"),
        )


# -----------------------------------------------------------------------------
# Import
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class SubmittedRow:
    """Typed values of one importable row."""

    row_number: int
    values: dict[str, Any]


@dataclass(frozen=True)
class ImportRequest:
    entity: str
    context: ImportContext
    rows: tuple[SubmittedRow, ...]

    def to_payload(self) -> dict[str, Any]:
        return {
            "tableName": self.entity,
            "context": context_to_payload(self.context),
            "rows": [{"rowNumber": r.row_number, "data": dict(r.values)} for r in self.rows],
        }

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> ImportRequest:
        return cls(
            entity=data["tableName"],
            context=context_from_payload(data["context"]),
            rows=tuple(
                SubmittedRow(row_number=int(r["rowNumber"]), values=dict(r.get("data") or {}))
                for r in data.get("rows", ())
            ),
        )


def result_to_payload(result: ImportResult) -> dict[str, Any]:
    s = result.summary
    return {
        "success": result.success,
        "summary": {
            "total": s.total,
            "inserted": s.inserted,
            "updated": s.updated,
            "skipped": s.skipped,
            "errors": s.errors,
        },
        "errors": [{"rowNumber": e.row_number, "error": e.error} for e in result.errors],
        "failedRowNumbers": list(result.failed_row_numbers),
        "importLogId": str(result.import_log_id) if result.import_log_id else None,
    }


def result_from_payload(data: Mapping[str, Any]) -> ImportResult:
    s = data.get("summary") or {}
    errors = tuple(
        ImportRowError(row_number=int(e["rowNumber"]), error=str(e["error"]))
        for e in data.get("errors", ())
    )
    failed = data.get("failedRowNumbers")
    log_id = data.get("importLogId")
    return ImportResult(
        success=bool(data.get("success", False)),
        summary=ImportSummary(
            total=int(s.get("total", 0)),
            inserted=int(s.get("inserted", 0)),
            updated=int(s.get("updated", 0)),
            skipped=int(s.get("skipped", 0)),
            errors=int(s.get("errors", 0)),
        ),
        errors=errors,
        failed_row_numbers=(
            tuple(int(n) for n in failed)
            if failed is not None
            else tuple(e.row_number for e in errors)
        ),
        import_log_id=UUID(log_id) if log_id else None,
    )
