"""
siteops_ingestion.domain -- Pure types and value objects for the mass upload.

ZERO I/O.
"""

from siteops_ingestion.domain.types import (
    ContextRequirement,
    ErrorKind,
    FieldConfig,
    FieldType,
    ImportContext,
    ImportProgress,
    ImportResult,
    ImportRowError,
    ImportStatus,
    ImportSummary,
    LookupTarget,
    ParsedRow,
    ParseResult,
    RowStatus,
    TableConfig,
    ValidationError,
    status_for,
)

__all__ = [
    "ContextRequirement",
    "ErrorKind",
    "FieldConfig",
    "FieldType",
    "ImportContext",
    "ImportProgress",
    "ImportResult",
    "ImportRowError",
    "ImportStatus",
    "ImportSummary",
    "LookupTarget",
    "ParsedRow",
    "ParseResult",
    "RowStatus",
    "TableConfig",
    "ValidationError",
    "status_for",
]
