"""
MassUploadWizard -- the client-side session that drives one upload.

Steps, in order::

    select-entity -> upload -> preview -> import (terminal)

Forward moves are gated by ``can_proceed()``; ``back()`` and ``reset()`` are
always allowed and clear whatever the earlier step produces.  The wizard owns
a single ParseResult and replaces it on every correction, never mutating it.

The two round trips go through an ``IngestionTransport``.  A failed
revalidation is not fatal: the wizard keeps the client-side validation,
re-checks edited rows locally, and shows a dismissable notice.  A failed
import ends in a terminal ``error`` progress carrying the raw reason.
"""

from __future__ import annotations

import csv
import zipfile
from collections.abc import Callable, Iterable
from enum import Enum
from uuid import UUID

from openpyxl.utils.exceptions import InvalidFileException

from siteops_ingestion.adapters import adapter_for
from siteops_ingestion.corrections import store
from siteops_ingestion.corrections.store import CorrectionAction
from siteops_ingestion.domain.types import (
    ImportContext,
    ImportProgress,
    ImportResult,
    ImportStatus,
    ParsedRow,
    ParseResult,
    TableConfig,
)
from siteops_ingestion.parsing import HeaderCheck, build_row, check_headers, parse_source
from siteops_ingestion.registry import SchemaRegistry
from siteops_ingestion.transport.base import IngestionTransport
from siteops_ingestion.transport.messages import (
    ImportRequest,
    RawRow,
    RevalidateRequest,
    SubmittedRow,
)
from siteops_kernel.exceptions import TransportError, WizardTransitionError
from siteops_kernel.logging_config import LogContext, get_logger

logger = get_logger("ingestion.wizard")

_UNREADABLE_FILE_ERRORS = (
    csv.Error,
    ValueError,
    KeyError,
    TypeError,
    zipfile.BadZipFile,
    InvalidFileException,
)


class WizardStep(str, Enum):
    SELECT_ENTITY = "select-entity"
    UPLOAD = "upload"
    PREVIEW = "preview"
    IMPORT = "import"


STEPS: tuple[WizardStep, ...] = tuple(WizardStep)


class MassUploadWizard:
    """
    One mass-upload session.

    Args:
        registry: Table schemas.
        transport: Carries revalidation and import requests to the server.
        caller_id: Identity stamped on imported records.
        caller_name: Display name stamped on imported records.
        on_success: Called with the ImportResult when an import fully succeeds.
        on_error: Called with a message when an import fails or partly fails.
    """

    def __init__(
        self,
        registry: SchemaRegistry,
        transport: IngestionTransport,
        *,
        caller_id: UUID,
        caller_name: str,
        on_success: Callable[[ImportResult], None] | None = None,
        on_error: Callable[[str], None] | None = None,
    ):
        self._registry = registry
        self._transport = transport
        self._caller_id = caller_id
        self._caller_name = caller_name
        self._on_success = on_success
        self._on_error = on_error

        self._step_index = 0
        self._entity: str | None = None
        self._site_id: str | None = None
        self._filename: str | None = None
        self._header_check: HeaderCheck | None = None
        self._parse_result: ParseResult | None = None
        self._notice: str | None = None
        self._progress = ImportProgress()
        self._result: ImportResult | None = None
        self._attempted: tuple[int, ...] = ()

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def step(self) -> WizardStep:
        return STEPS[self._step_index]

    @property
    def entity(self) -> str | None:
        return self._entity

    @property
    def table(self) -> TableConfig | None:
        return self._registry.get_config(self._entity) if self._entity else None

    @property
    def site_id(self) -> str | None:
        return self._site_id

    @property
    def filename(self) -> str | None:
        return self._filename

    @property
    def header_check(self) -> HeaderCheck | None:
        return self._header_check

    @property
    def parse_result(self) -> ParseResult | None:
        return self._parse_result

    @property
    def notice(self) -> str | None:
        """Dismissable message for the host to display."""
        return self._notice

    @property
    def progress(self) -> ImportProgress:
        return self._progress

    @property
    def result(self) -> ImportResult | None:
        return self._result

    @property
    def context(self) -> ImportContext:
        return ImportContext(
            caller_id=self._caller_id,
            caller_name=self._caller_name,
            site_id=self._site_id,
        )

    @property
    def importable_row_count(self) -> int:
        if self._parse_result is None:
            return 0
        return len(store.importable_rows(self._parse_result))

    def dismiss_notice(self) -> None:
        self._notice = None

    # -------------------------------------------------------------------------
    # Step 1: entity and site
    # -------------------------------------------------------------------------

    def select_entity(self, entity: str) -> TableConfig:
        """Choose the destination entity. Changing it discards any loaded file."""
        table = self._registry.require(entity)
        if entity != self._entity:
            self._clear_file()
        self._entity = entity
        return table

    def select_site(self, site_id: str | None) -> None:
        self._site_id = site_id or None

    # -------------------------------------------------------------------------
    # Step 2: file
    # -------------------------------------------------------------------------

    def load_text(self, text: str | bytes, filename: str = "upload.csv") -> ParseResult | None:
        return self.load_file(filename, text)

    def load_file(self, filename: str, content: str | bytes) -> ParseResult | None:
        """
        Parse an uploaded file for the selected entity.

        Returns the ParseResult, or None when the file is unreadable or lacks
        required columns; the reason is left in ``notice`` and any previously
        loaded file is discarded.
        """
        table = self._require_table("upload")
        self._clear_file()
        self._filename = filename

        with LogContext.bind(producer="wizard", entity=table.name, site_id=self._site_id):
            try:
                source = adapter_for(filename).read(content)
            except _UNREADABLE_FILE_ERRORS as exc:
                logger.warning(
                    "file_rejected",
                    extra={"file_name": filename, "reason": str(exc)},
                )
                self._notice = f"Failed to process file: {exc}"
                return None

            self._header_check = check_headers(source.headers, table)
            if not self._header_check.valid:
                missing = ", ".join(self._header_check.missing_required)
                logger.info(
                    "file_rejected",
                    extra={"file_name": filename, "missing_required": missing},
                )
                self._notice = f"Missing required columns: {missing}"
                return None

            self._parse_result = parse_source(source, table)
        return self._parse_result

    # -------------------------------------------------------------------------
    # Step 3: corrections
    # -------------------------------------------------------------------------

    def dispatch(self, action: CorrectionAction) -> ParseResult:
        self._parse_result = store.apply(self._require_parse_result(), action)
        return self._parse_result

    def edit_cell(self, row_number: int, header: str, value: str) -> ParseResult:
        return self.dispatch(store.EditCell(row_number, header, value))

    def delete_row(self, row_number: int) -> ParseResult:
        return self.dispatch(store.DeleteRow(row_number))

    def toggle_skip(self, row_number: int) -> ParseResult:
        return self.dispatch(store.ToggleSkip(row_number))

    def skip_all_samples(self) -> ParseResult:
        return self.dispatch(store.SkipAllSamples())

    def remove_error_rows(self) -> ParseResult:
        return self.dispatch(store.RemoveErrorRows())

    def revalidate(self) -> ParseResult:
        """
        Send every non-skipped row's raw text to the server and merge the answer
        by row number. On transport failure, edited rows are re-checked locally.
        """
        result = self._require_parse_result()
        table = self._require_table(self.step.value)
        rows = store.rows_for_import(result)
        if not rows:
            return result

        request = RevalidateRequest(
            entity=table.name,
            context=self.context,
            rows=tuple(RawRow(row_number=r.row_number, data=dict(r.raw)) for r in rows),
        )
        self._progress = ImportProgress(status=ImportStatus.VALIDATING, total_rows=len(rows))
        with LogContext.bind(producer="wizard", entity=table.name, site_id=self._site_id):
            try:
                response = self._transport.revalidate(request)
            except TransportError as exc:
                logger.warning(
                    "revalidation_failed",
                    extra={"reason": exc.reason, "row_count": len(rows)},
                )
                self._notice = f"Server validation unavailable: {exc.reason}"
                self._parse_result = store.merge_revalidated(
                    result, self._recheck_locally(rows, table)
                )
            else:
                self._parse_result = store.merge_revalidated(result, response.rows)
                logger.info(
                    "revalidation_merged",
                    extra={
                        "row_count": len(response.rows),
                        "error_rows": self._parse_result.error_rows,
                    },
                )
            finally:
                self._progress = ImportProgress()
        return self._parse_result

    @staticmethod
    def _recheck_locally(rows: Iterable[ParsedRow], table: TableConfig) -> list[ParsedRow]:
        return [
            build_row(r.raw, table, r.row_number, sample=r.is_sample_row)
            for r in rows
            if r.is_stale
        ]

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def blocked_reason(self) -> str | None:
        """Why the current step cannot move forward, or None when it can."""
        step = self.step
        if step is WizardStep.SELECT_ENTITY:
            if self._entity is None:
                return "no entity selected"
            table = self._registry.get_config(self._entity)
            if table is not None and table.requires_site and not self._site_id:
                return "a site must be selected"
            return None
        if step is WizardStep.UPLOAD:
            if self._parse_result is None or self._parse_result.is_empty:
                return "no data rows loaded"
            return None
        if step is WizardStep.PREVIEW:
            if self.importable_row_count == 0:
                return "no importable rows"
            return None
        return "import is the last step"

    def can_proceed(self) -> bool:
        return self.blocked_reason() is None

    def next(self) -> WizardStep:
        reason = self.blocked_reason()
        if reason is not None:
            raise WizardTransitionError(self.step.value, reason)
        self._notice = None
        if self.step is WizardStep.UPLOAD:
            self.revalidate()
        self._step_index += 1
        return self.step

    def back(self) -> WizardStep:
        self._notice = None
        if self._step_index == 0:
            return self.step
        self._step_index -= 1
        if self.step is WizardStep.SELECT_ENTITY:
            self._clear_file()
        self._clear_import()
        return self.step

    def reset(self) -> None:
        self._step_index = 0
        self._entity = None
        self._site_id = None
        self._notice = None
        self._clear_file()
        self._clear_import()

    # -------------------------------------------------------------------------
    # Step 4: import
    # -------------------------------------------------------------------------

    def submit(self) -> ImportResult | None:
        """
        Import every non-skipped valid or warning row.

        Edited rows are revalidated first. Returns the ImportResult, or None
        when the request itself failed (progress is then terminal ``error``).

        Only one submit is allowed per visit to the import step; once rows
        have been sent, use ``retry_failed()`` so rows that were already
        written are not sent again.
        """
        if self.step is not WizardStep.IMPORT:
            raise WizardTransitionError(self.step.value, "submit is only allowed on the import step")
        if self._attempted:
            raise WizardTransitionError(
                self.step.value, "rows were already submitted; use retry_failed for failed rows"
            )
        result = self._require_parse_result()
        if any(r.is_stale for r in store.rows_for_import(result)):
            self.revalidate()
        return self._submit_rows(store.importable_rows(self._require_parse_result()))

    def retry_failed(self) -> ImportResult | None:
        """
        Resubmit exactly the rows the last attempt did not import.

        After a completed import these are the reported ``failed_row_numbers``;
        after a failed request (transport error) it is every row that request
        carried.
        """
        if self._result is not None:
            failed = set(self._result.failed_row_numbers)
        elif self._progress.status is ImportStatus.ERROR:
            failed = set(self._attempted)
        else:
            failed = set()
        if not failed:
            raise WizardTransitionError(self.step.value, "no failed rows to retry")
        rows = [
            r for r in self._require_parse_result().rows
            if r.row_number in failed
        ]
        return self._submit_rows(rows)

    def _submit_rows(self, rows: list[ParsedRow]) -> ImportResult | None:
        table = self._require_table(self.step.value)
        request = ImportRequest(
            entity=table.name,
            context=self.context,
            rows=tuple(SubmittedRow(row_number=r.row_number, values=dict(r.values)) for r in rows),
        )
        self._progress = ImportProgress(status=ImportStatus.IMPORTING, total_rows=len(rows))
        self._attempted = tuple(r.row_number for r in rows)

        with LogContext.bind(
            producer="wizard",
            actor_id=self._caller_id,
            entity=table.name,
            site_id=self._site_id,
        ):
            try:
                outcome = self._transport.submit(request)
            except TransportError as exc:
                logger.warning(
                    "import_failed",
                    extra={"reason": exc.reason, "row_count": len(rows)},
                )
                self._result = None
                self._progress = ImportProgress(
                    status=ImportStatus.ERROR,
                    total_rows=len(rows),
                    error_count=len(rows),
                    message=exc.reason,
                )
                self._notice = exc.reason
                if self._on_error is not None:
                    self._on_error(exc.reason)
                return None

        summary = outcome.summary
        self._result = outcome
        self._progress = ImportProgress(
            status=ImportStatus.COMPLETED if outcome.success else ImportStatus.ERROR,
            current_row=summary.total,
            total_rows=summary.total,
            success_count=summary.success_count,
            error_count=summary.errors,
            message=(
                f"Successfully imported {summary.success_count} records"
                if outcome.success
                else f"Import completed with {summary.errors} failed rows"
            ),
        )
        if outcome.success:
            if self._on_success is not None:
                self._on_success(outcome)
        elif self._on_error is not None:
            self._on_error(self._progress.message or "Import completed with errors")
        return outcome

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _require_table(self, step: str) -> TableConfig:
        if self._entity is None:
            raise WizardTransitionError(step, "no entity selected")
        return self._registry.require(self._entity)

    def _require_parse_result(self) -> ParseResult:
        if self._parse_result is None:
            raise WizardTransitionError(self.step.value, "no file loaded")
        return self._parse_result

    def _clear_file(self) -> None:
        self._filename = None
        self._header_check = None
        self._parse_result = None

    def _clear_import(self) -> None:
        self._progress = ImportProgress()
        self._result = None
        self._attempted = ()


__all__ = ["MassUploadWizard", "STEPS", "WizardStep"]
