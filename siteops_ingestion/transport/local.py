"""In-process transport: calls the server-side services directly."""

from __future__ import annotations

from typing import TYPE_CHECKING

from siteops_ingestion.domain.types import ImportResult
from siteops_ingestion.transport.messages import (
    ImportRequest,
    RevalidateRequest,
    RevalidateResponse,
)
from siteops_kernel.exceptions import SiteOpsError, TransportError

if TYPE_CHECKING:
    from siteops_ingestion.revalidation.service import RevalidationService
    from siteops_ingestion.services.import_service import ImportService


class LocalTransport:
    """
    Same failure surface as the HTTP transport: service errors come back as
    TransportError. The caller owns the database transaction.
    """

    def __init__(
        self,
        revalidation_service: RevalidationService,
        import_service: ImportService,
    ):
        self._revalidation = revalidation_service
        self._imports = import_service

    def revalidate(self, request: RevalidateRequest) -> RevalidateResponse:
        try:
            return self._revalidation.revalidate(request)
        except SiteOpsError as exc:
            raise TransportError("validate", str(exc)) from exc

    def submit(self, request: ImportRequest) -> ImportResult:
        try:
            return self._imports.import_rows(request)
        except SiteOpsError as exc:
            raise TransportError("import", str(exc)) from exc
