"""
XLSX source adapter.

Reads the first (or a named) worksheet with openpyxl in read-only mode.
The first non-empty row is the header; cell values are normalized to the
same text the delimited-file path would have produced, so the parser and
validators see one representation.
"""

from __future__ import annotations

import io
from datetime import date, datetime, time
from typing import Any

import openpyxl

from siteops_ingestion.adapters.base import SourceLine, SourceTable


def cell_text(value: Any) -> str:
    """Normalize an openpyxl cell value to text."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, time):
        return value.strftime("%H:%M") if not value.second else value.strftime("%H:%M:%S")
    return str(value).strip()


class XlsxSourceAdapter:
    """Read an .xlsx workbook (bytes) into a SourceTable."""

    def __init__(self, sheet: str | int | None = None):
        self._sheet = sheet

    def read(self, content: str | bytes) -> SourceTable:
        if isinstance(content, str):
            raise TypeError("XLSX content must be bytes")

        wb = openpyxl.load_workbook(io.BytesIO(content), read_only=True, data_only=True)
        try:
            sheet = self._get_sheet(wb)
            headers: tuple[str, ...] | None = None
            lines: list[SourceLine] = []
            for row_number, values in enumerate(sheet.iter_rows(values_only=True), start=1):
                cells = tuple(cell_text(v) for v in values)
                if headers is None:
                    if not any(cells):
                        continue
                    headers = tuple(c.strip() for c in cells)
                    # Trailing empty header cells are formatting residue.
                    while headers and not headers[-1]:
                        headers = headers[:-1]
                    continue
                lines.append(SourceLine(line_number=row_number, cells=cells[: len(headers)]))
        finally:
            wb.close()

        return SourceTable(headers=headers or (), lines=tuple(lines))

    def _get_sheet(self, wb: Any) -> Any:
        if self._sheet is None:
            return wb.active if wb.active is not None else wb.worksheets[0]
        if isinstance(self._sheet, int):
            return wb.worksheets[self._sheet]
        return wb[self._sheet]
