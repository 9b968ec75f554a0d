"""
Server side of the two mass-upload endpoints.

    POST /mass-upload/validate   -> MassUploadServer.handle_validate
    POST /mass-upload/import     -> MassUploadServer.handle_import

Each handler takes the decoded JSON body and returns ``(status, body)``.
It runs in its own ``session_scope()``, so a request commits on success and
rolls back when anything escapes. Pipeline errors (unknown entity, missing
context, malformed body) come back as 400 with ``{"success": false,
"error": ...}``, the shape HttpTransport reads.

Settings drive the whole stack: ``database_url`` and ``log_level`` at
construction, ``batch_size`` and ``max_error_details`` per import.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from sqlalchemy.orm import Session

from siteops_ingestion.persistence import SqlImportLogRecorder, SqlRecordStore
from siteops_ingestion.registry import SchemaRegistry, default_registry
from siteops_ingestion.revalidation import ReferenceCache, RevalidationService, SqlReferenceSource
from siteops_ingestion.services import ImportService
from siteops_ingestion.settings import IngestionSettings
from siteops_ingestion.transport.messages import (
    ImportRequest,
    RevalidateRequest,
    result_to_payload,
)
from siteops_kernel.db.engine import init_engine_from_url, session_scope
from siteops_kernel.domain.clock import Clock, SystemClock
from siteops_kernel.exceptions import SiteOpsError
from siteops_kernel.logging_config import configure_logging, get_logger

logger = get_logger("ingestion.server")

Response = tuple[int, dict[str, Any]]

_MALFORMED_BODY_ERRORS = (KeyError, TypeError, ValueError)


class MassUploadServer:
    def __init__(
        self,
        settings: IngestionSettings,
        *,
        registry: SchemaRegistry | None = None,
        clock: Clock | None = None,
    ):
        self._settings = settings
        self._registry = registry or default_registry()
        self._clock = clock or SystemClock()
        # Logging first: engine init configures it with defaults otherwise.
        configure_logging(level=settings.log_level.upper())
        init_engine_from_url(settings.database_url)

    def handle_validate(self, payload: Mapping[str, Any]) -> Response:
        def run(session: Session) -> dict[str, Any]:
            request = RevalidateRequest.from_payload(payload)
            service = RevalidationService(
                self._registry, ReferenceCache(SqlReferenceSource(session))
            )
            return service.revalidate(request).to_payload()

        return self._handle("validate", run)

    def handle_import(self, payload: Mapping[str, Any]) -> Response:
        def run(session: Session) -> dict[str, Any]:
            request = ImportRequest.from_payload(payload)
            service = ImportService.from_settings(
                SqlRecordStore(session),
                self._registry,
                self._settings,
                self._clock,
                import_log=SqlImportLogRecorder(session, self._clock),
            )
            return result_to_payload(service.import_rows(request))

        return self._handle("import", run)

    def _handle(self, operation: str, run: Callable[[Session], dict[str, Any]]) -> Response:
        try:
            with session_scope() as session:
                body = run(session)
        except SiteOpsError as exc:
            logger.warning(
                "request_rejected",
                extra={"operation": operation, "error_code": exc.code, "reason": str(exc)},
            )
            return 400, {"success": False, "error": str(exc)}
        except _MALFORMED_BODY_ERRORS as exc:
            logger.warning(
                "request_rejected",
                extra={"operation": operation, "reason": f"malformed request: {exc!r}"},
            )
            return 400, {"success": False, "error": f"malformed request: {exc!r}"}
        return 200, body


__all__ = ["MassUploadServer"]
