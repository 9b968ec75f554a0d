"""
Interactive corrections over a ParseResult.

Every transition is a pure function returning a new ParseResult built through
``ParseResult.from_rows``, so the valid/warning/error counts always describe
the non-skipped rows. Row order is preserved.

Manual cell edits are NOT revalidated here: the edited header is recorded on
the row (``edited_fields``) and the row's status stays as it was until the
server revalidation merges a fresh row back in.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace

from siteops_ingestion.domain.types import ParsedRow, ParseResult, RowStatus
from siteops_kernel.exceptions import RowNotFoundError


def _rebuild(result: ParseResult, rows: Iterable[ParsedRow]) -> ParseResult:
    return ParseResult.from_rows(rows, result.headers)


def _update_row(
    result: ParseResult,
    row_number: int,
    change: Callable[[ParsedRow], ParsedRow],
) -> ParseResult:
    found = False
    rows: list[ParsedRow] = []
    for row in result.rows:
        if row.row_number == row_number:
            found = True
            row = change(row)
        rows.append(row)
    if not found:
        raise RowNotFoundError(row_number)
    return _rebuild(result, rows)


def edit_cell(
    result: ParseResult, row_number: int, header: str, value: str
) -> ParseResult:
    """Replace one raw cell. Values, errors and status are left untouched."""

    def change(row: ParsedRow) -> ParsedRow:
        edited = row.edited_fields
        if header not in edited:
            edited = edited + (header,)
        return replace(row, raw={**row.raw, header: value}, edited_fields=edited)

    return _update_row(result, row_number, change)


def delete_row(result: ParseResult, row_number: int) -> ParseResult:
    if result.row(row_number) is None:
        raise RowNotFoundError(row_number)
    return _rebuild(result, (r for r in result.rows if r.row_number != row_number))


def toggle_skip(result: ParseResult, row_number: int) -> ParseResult:
    return _update_row(
        result, row_number, lambda row: replace(row, is_skipped=not row.is_skipped)
    )


def skip_all_samples(result: ParseResult) -> ParseResult:
    return _rebuild(
        result,
        (replace(r, is_skipped=True) if r.is_sample_row else r for r in result.rows),
    )


def remove_error_rows(result: ParseResult) -> ParseResult:
    """Delete every non-skipped row whose status is error."""
    return _rebuild(
        result,
        (r for r in result.rows if r.is_skipped or r.status != RowStatus.ERROR),
    )


def merge_revalidated(
    result: ParseResult, revalidated: Iterable[ParsedRow]
) -> ParseResult:
    """
    Replace rows by row number with their server-validated versions.

    The client's skip and sample flags win; rows the server did not return
    are kept as they were.
    """
    by_number = {r.row_number: r for r in revalidated}
    merged: list[ParsedRow] = []
    for row in result.rows:
        fresh = by_number.get(row.row_number)
        if fresh is None:
            merged.append(row)
            continue
        merged.append(
            replace(
                fresh,
                is_skipped=row.is_skipped,
                is_sample_row=row.is_sample_row,
                edited_fields=(),
            )
        )
    return _rebuild(result, merged)


def rows_for_import(result: ParseResult) -> list[ParsedRow]:
    """Every row the user has not skipped."""
    return [r for r in result.rows if not r.is_skipped]


def importable_rows(result: ParseResult) -> list[ParsedRow]:
    """Non-skipped rows whose status is valid or warning."""
    return [r for r in result.rows if r.is_importable]


# -----------------------------------------------------------------------------
# Actions
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class EditCell:
    row_number: int
    header: str
    value: str


@dataclass(frozen=True)
class DeleteRow:
    row_number: int


@dataclass(frozen=True)
class ToggleSkip:
    row_number: int


@dataclass(frozen=True)
class SkipAllSamples:
    pass


@dataclass(frozen=True)
class RemoveErrorRows:
    pass


CorrectionAction = EditCell | DeleteRow | ToggleSkip | SkipAllSamples | RemoveErrorRows


def apply(result: ParseResult, action: CorrectionAction) -> ParseResult:
    """Reducer: apply one correction action."""
    if isinstance(action, EditCell):
        return edit_cell(result, action.row_number, action.header, action.value)
    if isinstance(action, DeleteRow):
        return delete_row(result, action.row_number)
    if isinstance(action, ToggleSkip):
        return toggle_skip(result, action.row_number)
    if isinstance(action, SkipAllSamples):
        return skip_all_samples(result)
    if isinstance(action, RemoveErrorRows):
        return remove_error_rows(result)
    raise TypeError(f"Unknown correction action: {action!r}")
