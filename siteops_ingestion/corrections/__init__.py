"""Pure correction transitions over a ParseResult."""

from siteops_ingestion.corrections.store import (
    CorrectionAction,
    DeleteRow,
    EditCell,
    RemoveErrorRows,
    SkipAllSamples,
    ToggleSkip,
    apply,
    delete_row,
    edit_cell,
    importable_rows,
    merge_revalidated,
    remove_error_rows,
    rows_for_import,
    skip_all_samples,
    toggle_skip,
)

__all__ = [
    "CorrectionAction",
    "DeleteRow",
    "EditCell",
    "RemoveErrorRows",
    "SkipAllSamples",
    "ToggleSkip",
    "apply",
    "delete_row",
    "edit_cell",
    "importable_rows",
    "merge_revalidated",
    "remove_error_rows",
    "rows_for_import",
    "skip_all_samples",
    "toggle_skip",
]
