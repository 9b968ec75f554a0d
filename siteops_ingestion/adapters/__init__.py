"""Source adapters: uploaded file content -> SourceTable (no DB)."""

from siteops_ingestion.adapters.base import SourceAdapter, SourceLine, SourceTable
from siteops_ingestion.adapters.csv_adapter import CsvSourceAdapter, write_csv
from siteops_ingestion.adapters.xlsx_adapter import XlsxSourceAdapter


def adapter_for(filename: str) -> SourceAdapter:
    """Pick an adapter from the file extension; anything else is delimited text."""
    if filename.lower().endswith((".xlsx", ".xlsm")):
        return XlsxSourceAdapter()
    return CsvSourceAdapter()


__all__ = [
    "SourceAdapter",
    "SourceLine",
    "SourceTable",
    "CsvSourceAdapter",
    "XlsxSourceAdapter",
    "adapter_for",
    "write_csv",
]
