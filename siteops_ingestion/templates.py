"""
Downloadable templates and the failed-row export.

Templates are derived from the TableConfig alone, so the header row a user
downloads always matches what the parser expects.
"""

from __future__ import annotations

from dataclasses import dataclass

from siteops_ingestion.adapters.csv_adapter import write_csv
from siteops_ingestion.domain.types import FieldConfig, FieldType, ParseResult, RowStatus, TableConfig
from siteops_ingestion.parsing.parser import COMMENT_PREFIX, cell_value
from siteops_ingestion.registry import SchemaRegistry

ERRORS_HEADER = "Errors"

_TYPE_HINTS = {
    FieldType.DATE: "DATE (YYYY-MM-DD)",
    FieldType.TIME: "TIME (HH:MM)",
    FieldType.NUMBER: "NUMBER",
    FieldType.BOOLEAN: "TRUE/FALSE",
    FieldType.LOOKUP: "TEXT (lookup)",
}


def _example_values(table: TableConfig) -> list[list[str]]:
    if not table.example_row:
        return []
    return [[table.example_row.get(h, "") for h in table.headers]]


def describe_field(field: FieldConfig) -> str:
    """Short type/required hint, e.g. ``NUMBER - REQUIRED``."""
    if field.field_type is FieldType.ENUM:
        parts = [f"OPTIONS: {'/'.join(field.enum_values)}"]
    else:
        parts = [_TYPE_HINTS.get(field.field_type, "TEXT")]
    if field.required:
        parts.append("REQUIRED")
    return " - ".join(parts)


def generate_template(table: TableConfig) -> str:
    """Header row plus the configured example row."""
    return write_csv(table.headers, _example_values(table))


def generate_template_with_descriptions(table: TableConfig) -> str:
    """
    Like ``generate_template`` with a comment row between the header and the
    example. Every cell of that row starts with ``#``, so the parser skips it.
    """
    description = [f"{COMMENT_PREFIX} {describe_field(f)}" for f in table.fields]
    return write_csv(table.headers, [description, *_example_values(table)])


def template_filename(table: TableConfig) -> str:
    return f"{table.name}_template.csv"


@dataclass(frozen=True)
class TemplateInfo:
    entity: str
    display_name: str
    description: str
    field_count: int
    required_fields: tuple[str, ...]
    optional_fields: tuple[str, ...]
    lookup_fields: tuple[str, ...]  # "Header (from table)"


def template_info(table: TableConfig) -> TemplateInfo | None:
    if not table.is_importable:
        return None
    return TemplateInfo(
        entity=table.name,
        display_name=table.display_name,
        description=table.description,
        field_count=len(table.fields),
        required_fields=tuple(f.header for f in table.fields if f.required),
        optional_fields=tuple(f.header for f in table.fields if not f.required),
        lookup_fields=tuple(
            f"{f.header} (from {f.lookup.table})"
            for f in table.fields
            if f.field_type is FieldType.LOOKUP and f.lookup is not None
        ),
    )


def all_template_infos(registry: SchemaRegistry) -> list[TemplateInfo]:
    infos = (template_info(t) for t in registry.list_importable())
    return [i for i in infos if i is not None]


def export_failed_rows(result: ParseResult, table: TableConfig) -> str:
    """
    CSV of the non-skipped error rows with their original text and an extra
    ``Errors`` column. Empty string when no row failed.
    """
    failed = [r for r in result.rows if r.status == RowStatus.ERROR and not r.is_skipped]
    if not failed:
        return ""
    data = [
        [cell_value(r.raw, h) for h in table.headers] + ["; ".join(e.message for e in r.errors)]
        for r in failed
    ]
    return write_csv([*table.headers, ERRORS_HEADER], data)
