"""
Import service: materialize -> de-duplicate -> batched write.

Server side of the import step. Receives rows the client has already
validated (and the server has revalidated), injects context, and writes
them through a RecordSink in batches. A failed batch is retried one row at
a time so only the offending rows are reported as failed.
Uses structured logging (LogContext, get_logger("ingestion.*")).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from siteops_ingestion.domain.types import (
    ImportProgress,
    ImportResult,
    ImportRowError,
    ImportStatus,
    ImportSummary,
    TableConfig,
)
from siteops_ingestion.persistence.base import RecordSink, WriteOutcome
from siteops_ingestion.persistence.import_log import ImportLogRecorder
from siteops_ingestion.registry import SchemaRegistry
from siteops_ingestion.transform.materialize import (
    DEFAULT_BATCH_SIZE,
    materialize,
    split_into_batches,
    upsert_config,
)
from siteops_ingestion.transport.messages import ImportRequest
from siteops_kernel.domain.clock import Clock, SystemClock
from siteops_kernel.exceptions import MissingContextError, RecordWriteError
from siteops_kernel.logging_config import LogContext, get_logger

if TYPE_CHECKING:
    from siteops_ingestion.settings import IngestionSettings

logger = get_logger("ingestion.import_service")

ProgressCallback = Callable[[ImportProgress], None]


class ImportService:
    """
    Write validated rows of one entity into its destination table.

    Contract:
        - Rows are written in submission order, ``batch_size`` at a time,
          each batch inside its own SAVEPOINT (via the sink).
        - Entities with a natural key update the matching row, else insert.
          Within one request, later rows repeating an earlier row's key are
          counted as skipped.
        - ``summary.errors`` and ``failed_row_numbers`` cover every failure;
          the ``errors`` detail list stops at ``max_error_details``.
        - The caller owns the transaction (commit/rollback).
    """

    def __init__(
        self,
        sink: RecordSink,
        registry: SchemaRegistry,
        clock: Clock | None = None,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        max_error_details: int = 100,
        import_log: ImportLogRecorder | None = None,
    ):
        self._sink = sink
        self._registry = registry
        self._clock = clock or SystemClock()
        self._batch_size = batch_size
        self._max_error_details = max_error_details
        self._import_log = import_log

    @classmethod
    def from_settings(
        cls,
        sink: RecordSink,
        registry: SchemaRegistry,
        settings: IngestionSettings,
        clock: Clock | None = None,
        *,
        import_log: ImportLogRecorder | None = None,
    ) -> ImportService:
        return cls(
            sink,
            registry,
            clock,
            batch_size=settings.batch_size,
            max_error_details=settings.max_error_details,
            import_log=import_log,
        )

    def import_rows(
        self,
        request: ImportRequest,
        on_progress: ProgressCallback | None = None,
    ) -> ImportResult:
        """
        Import the request's rows.

        Raises:
            UnknownEntityError: entity missing or not importable.
            MissingContextError: entity needs a site and none was given.
        """
        table = self._registry.require(request.entity)
        context = request.context
        if table.requires_site and not context.site_id:
            raise MissingContextError(table.name, "site_id")

        with LogContext.bind(
            correlation_id=str(uuid4()),
            producer="ingestion",
            actor_id=str(context.caller_id),
            entity=table.name,
            site_id=context.site_id,
        ):
            logger.info(
                "import_started",
                extra={"row_count": len(request.rows), "batch_size": self._batch_size},
            )

            pending, skipped = self._prepare(request, table)

            inserted = updated = 0
            failures: list[ImportRowError] = []
            processed = 0
            for batch_index, batch in enumerate(split_into_batches(pending, self._batch_size)):
                outcomes = self._write_batch(table, batch_index, batch, failures)
                inserted += sum(1 for o in outcomes if o == WriteOutcome.INSERTED)
                updated += sum(1 for o in outcomes if o == WriteOutcome.UPDATED)
                processed += len(batch)
                if on_progress is not None:
                    on_progress(ImportProgress(
                        status=ImportStatus.IMPORTING,
                        current_row=processed,
                        total_rows=len(pending),
                        success_count=inserted + updated,
                        error_count=len(failures),
                    ))

            summary = ImportSummary(
                total=len(request.rows),
                inserted=inserted,
                updated=updated,
                skipped=skipped,
                errors=len(failures),
            )
            details = tuple(failures[: self._max_error_details])

            log_id = None
            if self._import_log is not None:
                log_id = self._import_log.record(table.name, context, summary, details)

            logger.info(
                "import_completed",
                extra={
                    "total": summary.total,
                    "inserted": summary.inserted,
                    "updated": summary.updated,
                    "skipped": summary.skipped,
                    "errors": summary.errors,
                },
            )
            return ImportResult(
                success=not failures,
                summary=summary,
                errors=details,
                failed_row_numbers=tuple(f.row_number for f in failures),
                import_log_id=log_id,
            )

    def _prepare(
        self, request: ImportRequest, table: TableConfig
    ) -> tuple[list[tuple[int, dict[str, Any]]], int]:
        """Materialize every row and drop repeated natural keys."""
        upsert = upsert_config(table)
        pending: list[tuple[int, dict[str, Any]]] = []
        seen: set[tuple[Any, ...]] = set()
        skipped = 0
        for row in request.rows:
            record = materialize(row.values, table, request.context, self._clock)
            if upsert.can_upsert:
                key = tuple(record.get(k) for k in upsert.conflict_columns)
                if None not in key:
                    if key in seen:
                        skipped += 1
                        logger.info(
                            "row_skipped",
                            extra={"row_number": row.row_number, "reason": "duplicate_key"},
                        )
                        continue
                    seen.add(key)
            pending.append((row.row_number, record))
        return pending, skipped

    def _write_batch(
        self,
        table: TableConfig,
        batch_index: int,
        batch: list[tuple[int, dict[str, Any]]],
        failures: list[ImportRowError],
    ) -> list[WriteOutcome]:
        conflict_columns = upsert_config(table).conflict_columns
        try:
            outcomes = self._sink.write_batch(
                table.name, [record for _, record in batch], conflict_columns
            )
        except RecordWriteError as exc:
            logger.warning(
                "batch_write_failed",
                extra={"batch_index": batch_index, "batch_size": len(batch), "reason": exc.reason},
            )
        else:
            logger.debug(
                "batch_written",
                extra={"batch_index": batch_index, "batch_size": len(batch)},
            )
            return outcomes

        # Isolate the offending rows.
        outcomes = []
        for row_number, record in batch:
            try:
                outcomes.append(self._sink.write_one(table.name, record, conflict_columns))
            except RecordWriteError as exc:
                failures.append(ImportRowError(row_number=row_number, error=exc.reason))
                logger.warning(
                    "row_write_failed",
                    extra={"row_number": row_number, "reason": exc.reason},
                )
        return outcomes
