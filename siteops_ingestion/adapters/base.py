"""
Source adapter protocol and the in-memory table it produces.

Contract:
    SourceAdapter.read() turns an uploaded file's content into a SourceTable:
    the header cells plus every following line with its 1-based physical
    line number. Adapters do no validation and touch no database.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class SourceLine:
    """One data line. ``line_number`` counts the header as line 1."""

    line_number: int
    cells: tuple[str, ...]

    @property
    def is_blank(self) -> bool:
        return not any(c.strip() for c in self.cells)


@dataclass(frozen=True)
class SourceTable:
    headers: tuple[str, ...]
    lines: tuple[SourceLine, ...] = ()
    detected_delimiter: str | None = None

    def as_dict(self, line: SourceLine) -> dict[str, str]:
        """Map header -> cell text. Short lines pad with empty strings."""
        cells = line.cells + ("",) * (len(self.headers) - len(line.cells))
        return {h: cells[i] for i, h in enumerate(self.headers) if h}


@runtime_checkable
class SourceAdapter(Protocol):
    """Protocol for reading uploaded file content into a SourceTable."""

    def read(self, content: str | bytes) -> SourceTable:
        ...
