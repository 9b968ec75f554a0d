"""
RevalidationService -- authoritative server-side validation.

Re-runs the same per-row validation the client ran, then resolves every
lookup field to the id of a reference row. Unresolved lookups become
``lookup`` errors carrying a "Did you mean" suggestion when one exists.
"""

from __future__ import annotations

from dataclasses import replace
from uuid import uuid4

from siteops_ingestion.domain.types import (
    ErrorKind,
    FieldType,
    ParsedRow,
    TableConfig,
    ValidationError,
    status_for,
)
from siteops_ingestion.parsing.parser import build_row
from siteops_ingestion.registry import SchemaRegistry
from siteops_ingestion.revalidation.cache import ReferenceCache
from siteops_ingestion.transport.messages import RevalidateRequest, RevalidateResponse
from siteops_kernel.exceptions import MissingContextError
from siteops_kernel.logging_config import LogContext, get_logger

logger = get_logger("ingestion.revalidation")


class RevalidationService:
    def __init__(self, registry: SchemaRegistry, cache: ReferenceCache):
        self._registry = registry
        self._cache = cache

    def revalidate(self, request: RevalidateRequest) -> RevalidateResponse:
        """
        Validate raw rows with lookups resolved.

        Raises:
            UnknownEntityError: entity missing or not importable.
            MissingContextError: entity needs a site and none was given.
        """
        table = self._registry.require(request.entity)
        site_id = request.context.site_id
        if table.requires_site and not site_id:
            raise MissingContextError(table.name, "site_id")

        with LogContext.bind(
            correlation_id=str(uuid4()),
            producer="ingestion",
            actor_id=str(request.context.caller_id),
            entity=table.name,
            site_id=site_id,
        ):
            rows: list[ParsedRow] = []
            lookup_errors: list[ValidationError] = []
            for raw_row in request.rows:
                row = build_row(raw_row.data, table, raw_row.row_number)
                row, errors = self._resolve_lookups(row, table, site_id)
                rows.append(row)
                lookup_errors.extend(errors)

            logger.info(
                "rows_revalidated",
                extra={
                    "row_count": len(rows),
                    "lookup_error_count": len(lookup_errors),
                    "error_rows": sum(1 for r in rows if r.errors),
                },
            )
            return RevalidateResponse(
                success=True, rows=tuple(rows), lookup_errors=tuple(lookup_errors)
            )

    def _resolve_lookups(
        self, row: ParsedRow, table: TableConfig, site_id: str | None
    ) -> tuple[ParsedRow, list[ValidationError]]:
        values = dict(row.values)
        new_errors: list[ValidationError] = []
        failed_fields = {e.field for e in row.errors}

        for field in table.fields:
            if field.field_type != FieldType.LOOKUP or field.lookup is None:
                continue
            text = values.get(field.target)
            if not isinstance(text, str) or not text or field.target in failed_fields:
                continue

            match = self._cache.resolve(field.lookup, text, site_id)
            if match.found:
                values[field.target] = match.id
                continue

            label = field.lookup.display_field or field.header
            new_errors.append(ValidationError(
                row_number=row.row_number,
                field=field.target,
                header=field.header,
                value=text,
                kind=ErrorKind.LOOKUP,
                message=f'{label} not found: "{text}"',
                suggestion=f'Did you mean "{match.suggestion}"?' if match.suggestion else None,
            ))
            values[field.target] = None

        if not new_errors:
            return replace(row, values=values), []

        errors = row.errors + tuple(new_errors)
        return (
            replace(row, values=values, errors=errors, status=status_for(errors, row.warnings)),
            new_errors,
        )
