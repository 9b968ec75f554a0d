"""Tests for the correction transitions over a ParseResult."""

import pytest

from siteops_ingestion.corrections import (
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
    skip_all_samples,
    toggle_skip,
)
from siteops_ingestion.domain.types import ParseResult, RowStatus
from siteops_ingestion.parsing import build_row, parse_text
from siteops_kernel.exceptions import RowNotFoundError

TEXT = (
    "name,phone,category_id,role_id,daily_rate\n"
    "Ravi,9000000001,Skilled,Mason,800\n"  # 2 valid
    "Rajesh Kumar,9876543210,Skilled,Mason,850\n"  # 3 sample
    "Murugan,12345,Skilled,Helper,600\n"  # 4 error
    "Anil,9000000004,Skilled,Helper,650\n"  # 5 valid
)


@pytest.fixture
def laborers(registry):
    return registry.require("laborers")


@pytest.fixture
def parsed(laborers) -> ParseResult:
    return parse_text(TEXT, laborers)


def _counts_consistent(result: ParseResult) -> bool:
    active = [r for r in result.rows if not r.is_skipped]
    return result.valid_rows + result.warning_rows + result.error_rows == len(active)


class TestEditCell:
    def test_changes_raw_only(self, parsed):
        edited = edit_cell(parsed, 4, "phone", "9000000009")
        row = edited.row(4)
        assert row.raw["phone"] == "9000000009"
        assert row.values["phone"] == "12345"
        assert row.status == RowStatus.ERROR
        assert row.is_stale and row.edited_fields == ("phone",)

    def test_does_not_mutate_input(self, parsed):
        edit_cell(parsed, 2, "name", "Ravi S")
        assert parsed.row(2).raw["name"] == "Ravi"
        assert not parsed.row(2).is_stale

    def test_unknown_row(self, parsed):
        with pytest.raises(RowNotFoundError) as exc_info:
            edit_cell(parsed, 99, "name", "x")
        assert exc_info.value.code == "ROW_NOT_FOUND"


class TestDeleteAndSkip:
    def test_delete_shrinks_counts(self, parsed):
        result = delete_row(parsed, 4)
        assert result.total_rows == 3 and result.error_rows == 0
        assert [r.row_number for r in result.rows] == [2, 3, 5]

    def test_toggle_skip_keeps_status(self, parsed):
        result = toggle_skip(parsed, 4)
        assert result.row(4).is_skipped and result.row(4).status == RowStatus.ERROR
        assert result.error_rows == 0 and result.total_rows == 4
        assert _counts_consistent(result)
        assert not toggle_skip(result, 4).row(4).is_skipped

    def test_toggle_unknown_row(self, parsed):
        with pytest.raises(RowNotFoundError):
            toggle_skip(parsed, 1)

    def test_skip_all_samples(self, parsed):
        result = skip_all_samples(parsed)
        assert result.row(3).is_skipped
        assert result.valid_rows == 2
        assert result.skipped_rows == 1

    def test_remove_error_rows_keeps_skipped_errors(self, parsed):
        skipped = toggle_skip(parsed, 4)
        assert remove_error_rows(skipped).row(4) is not None
        cleaned = remove_error_rows(parsed)
        assert cleaned.row(4) is None and cleaned.error_rows == 0

    def test_importable_rows(self, parsed):
        result = skip_all_samples(parsed)
        assert [r.row_number for r in importable_rows(result)] == [2, 5]


class TestMergeRevalidated:
    def test_by_row_number_preserving_client_flags(self, parsed, laborers):
        result = toggle_skip(skip_all_samples(edit_cell(parsed, 4, "phone", "9000000009")), 5)
        fresh = build_row(result.row(4).raw, laborers, 4, sample=False)
        fresh_sample = build_row(result.row(3).raw, laborers, 3, sample=False)
        merged = merge_revalidated(result, [fresh, fresh_sample])

        assert merged.row(4).status == RowStatus.VALID
        assert not merged.row(4).is_stale
        assert merged.row(3).is_sample_row and merged.row(3).is_skipped
        assert merged.row(5).is_skipped
        assert [r.row_number for r in merged.rows] == [2, 3, 4, 5]
        assert merged.error_rows == 0

    def test_unreturned_rows_untouched(self, parsed):
        assert merge_revalidated(parsed, []).rows == parsed.rows


class TestReducer:
    def test_apply_sequence_keeps_counts_consistent(self, parsed):
        actions = [
            EditCell(4, "phone", "9000000009"),
            ToggleSkip(2),
            SkipAllSamples(),
            DeleteRow(5),
            RemoveErrorRows(),
        ]
        result = parsed
        for action in actions:
            result = apply(result, action)
            assert _counts_consistent(result)
        assert [r.row_number for r in result.rows] == [2, 3]

    def test_unknown_action(self, parsed):
        with pytest.raises(TypeError):
            apply(parsed, "delete everything")
