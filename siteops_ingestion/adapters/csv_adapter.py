"""
Delimited-text source adapter.

Uses the csv module over the whole (in-memory) upload. Strips a UTF-8 BOM,
picks the delimiter from the header line, and keeps physical line numbers
so quoted multi-line cells do not shift the numbering of later rows.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Sequence

from siteops_ingestion.adapters.base import SourceLine, SourceTable

CANDIDATE_DELIMITERS = (",", ";", "\t", "|")


def _decode(content: str | bytes) -> str:
    if isinstance(content, bytes):
        return content.decode("utf-8-sig")
    return content.removeprefix("\ufeff")


def detect_delimiter(header_line: str) -> str:
    """The candidate occurring most often in the header line; ',' on a tie."""
    best = ","
    best_count = header_line.count(",")
    for candidate in CANDIDATE_DELIMITERS[1:]:
        count = header_line.count(candidate)
        if count > best_count:
            best, best_count = candidate, count
    return best


class CsvSourceAdapter:
    """Read delimited text into a SourceTable."""

    def __init__(self, delimiter: str | None = None):
        self._delimiter = delimiter

    def read(self, content: str | bytes) -> SourceTable:
        text = _decode(content)
        first_line = next((ln for ln in text.splitlines() if ln.strip()), "")
        delimiter = self._delimiter or detect_delimiter(first_line)

        reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter)
        headers: tuple[str, ...] | None = None
        lines: list[SourceLine] = []
        previous_end = 0
        for record in reader:
            start = previous_end + 1
            previous_end = reader.line_num
            if headers is None:
                if not any(cell.strip() for cell in record):
                    continue
                headers = tuple(cell.strip() for cell in record)
                continue
            lines.append(SourceLine(line_number=start, cells=tuple(record)))

        return SourceTable(
            headers=headers or (),
            lines=tuple(lines),
            detected_delimiter=delimiter,
        )


def write_csv(headers: Sequence[str], rows: Iterable[Sequence[object]]) -> str:
    """Render rows as CSV text (minimal quoting, ``\\n`` line endings)."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)
    writer.writerows(rows)
    return buffer.getvalue()
