"""
Table registry loader (``siteops_ingestion.registry.loader``).

Parses the YAML registry document into frozen ``TableConfig`` instances.
Named enums and lookups are declared once at the top of the document and
referenced by name from field entries.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Structurally invalid table  -> ``InvalidTableConfigError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from siteops_ingestion.domain.types import (
    ContextRequirement,
    FieldConfig,
    FieldType,
    LookupTarget,
    TableConfig,
)
from siteops_kernel.exceptions import InvalidTableConfigError

DEFAULT_REGISTRY_PATH = Path(__file__).with_name("tables.yaml")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file and return its contents as a dict."""
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON form; identifies a registry revision."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def parse_lookup(name: str, data: dict[str, Any]) -> LookupTarget:
    """Parse a named LookupTarget."""
    try:
        return LookupTarget(
            table=data["table"],
            match_field=data["match_field"],
            display_field=data.get("display_field"),
            alternate_fields=tuple(data.get("alternate_fields", ())),
            site_scoped=bool(data.get("site_scoped", False)),
            filters=tuple(sorted((data.get("filters") or {}).items())),
        )
    except KeyError as exc:
        raise InvalidTableConfigError(name, f"lookup missing key {exc}") from exc


def parse_field(
    table: str,
    data: dict[str, Any],
    enums: dict[str, tuple[str, ...]],
    lookups: dict[str, LookupTarget],
) -> FieldConfig:
    """
    Parse one FieldConfig entry.

    Raises:
        InvalidTableConfigError: unknown type, unresolvable enum or lookup.
    """
    target = data.get("target")
    if not target:
        raise InvalidTableConfigError(table, "field without target")

    try:
        field_type = FieldType(data.get("type", "string"))
    except ValueError as exc:
        raise InvalidTableConfigError(
            table, f"field '{target}' has unknown type {data.get('type')!r}"
        ) from exc

    enum_values: tuple[str, ...] = ()
    if field_type == FieldType.ENUM:
        raw_enum = data.get("enum")
        if isinstance(raw_enum, str):
            if raw_enum not in enums:
                raise InvalidTableConfigError(
                    table, f"field '{target}' references unknown enum '{raw_enum}'"
                )
            enum_values = enums[raw_enum]
        elif raw_enum:
            enum_values = tuple(str(v) for v in raw_enum)

    lookup = None
    if field_type == FieldType.LOOKUP:
        lookup_name = data.get("lookup")
        if lookup_name not in lookups:
            raise InvalidTableConfigError(
                table, f"field '{target}' references unknown lookup {lookup_name!r}"
            )
        lookup = lookups[lookup_name]

    return FieldConfig(
        target=target,
        header=data.get("header", target),
        field_type=field_type,
        required=bool(data.get("required", False)),
        enum_values=enum_values,
        lookup=lookup,
        default=data.get("default"),
        pattern=data.get("pattern"),
        description=data.get("description", ""),
    )


def parse_table(
    name: str,
    data: dict[str, Any],
    enums: dict[str, tuple[str, ...]],
    lookups: dict[str, LookupTarget],
) -> TableConfig:
    """Parse a TableConfig. Headers must be unique case-insensitively."""
    fields = tuple(
        parse_field(name, f, enums, lookups) for f in data.get("fields") or ()
    )

    seen: set[str] = set()
    for f in fields:
        key = f.header.lower()
        if key in seen:
            raise InvalidTableConfigError(name, f"duplicate header '{f.header}'")
        seen.add(key)

    try:
        required_context = tuple(
            ContextRequirement(c) for c in data.get("required_context", ())
        )
    except ValueError as exc:
        raise InvalidTableConfigError(name, str(exc)) from exc

    example = data.get("example_row")
    return TableConfig(
        name=name,
        display_name=data.get("display_name", name),
        description=data.get("description", ""),
        required_context=required_context,
        upsert_key=tuple(data.get("upsert_key", ())),
        fields=fields,
        example_row=(
            MappingProxyType({k: str(v) for k, v in example.items()})
            if example
            else None
        ),
    )


def parse_registry(data: dict[str, Any]) -> dict[str, TableConfig]:
    """Parse a whole registry document into TableConfigs keyed by name."""
    enums = {
        name: tuple(str(v) for v in values)
        for name, values in (data.get("enums") or {}).items()
    }
    lookups = {
        name: parse_lookup(name, body)
        for name, body in (data.get("lookups") or {}).items()
    }
    return {
        name: parse_table(name, body or {}, enums, lookups)
        for name, body in (data.get("tables") or {}).items()
    }


def load_table_configs(
    path: Path | None = None,
) -> tuple[dict[str, TableConfig], str]:
    """Load the registry document. Returns (configs, checksum)."""
    data = load_yaml_file(path or DEFAULT_REGISTRY_PATH)
    return parse_registry(data), compute_checksum(data)
