"""Import log recording: one ImportLogModel row per import request."""

from __future__ import annotations

from typing import Protocol, runtime_checkable
from uuid import UUID

from sqlalchemy.orm import Session

from siteops_ingestion.domain.types import ImportContext, ImportRowError, ImportSummary
from siteops_ingestion.models.import_log import ImportLogModel
from siteops_kernel.domain.clock import Clock


@runtime_checkable
class ImportLogRecorder(Protocol):
    def record(
        self,
        entity: str,
        context: ImportContext,
        summary: ImportSummary,
        errors: tuple[ImportRowError, ...],
    ) -> UUID:
        ...


class SqlImportLogRecorder:
    def __init__(self, session: Session, clock: Clock):
        self._session = session
        self._clock = clock

    def record(
        self,
        entity: str,
        context: ImportContext,
        summary: ImportSummary,
        errors: tuple[ImportRowError, ...],
    ) -> UUID:
        now = self._clock.now()
        log = ImportLogModel(
            entity=entity,
            site_id=context.site_id,
            caller_name=context.caller_name,
            total=summary.total,
            inserted=summary.inserted,
            updated=summary.updated,
            skipped=summary.skipped,
            errors=summary.errors,
            error_details=[{"row_number": e.row_number, "error": e.error} for e in errors] or None,
            created_at=now,
            updated_at=now,
            created_by_id=context.caller_id,
        )
        self._session.add(log)
        self._session.flush()
        return log.id
