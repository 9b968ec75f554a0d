"""Row parsing: source table -> validated ParseResult (pure)."""

from siteops_ingestion.parsing.parser import (
    SAMPLE_DATA_PATTERNS,
    HeaderCheck,
    build_row,
    cell_value,
    check_headers,
    is_sample_row,
    parse_source,
    parse_text,
)

__all__ = [
    "SAMPLE_DATA_PATTERNS",
    "HeaderCheck",
    "build_row",
    "cell_value",
    "check_headers",
    "is_sample_row",
    "parse_source",
    "parse_text",
]
