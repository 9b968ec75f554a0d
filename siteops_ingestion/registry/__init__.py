"""
Schema registry -- the fixed set of entities that can be bulk uploaded.

Callers pass a ``SchemaRegistry`` explicitly; ``default_registry()`` is the
process-wide instance built from the bundled ``tables.yaml``.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from siteops_ingestion.domain.types import TableConfig
from siteops_ingestion.registry.loader import (
    load_table_configs,
    parse_registry,
)
from siteops_kernel.exceptions import UnknownEntityError


class SchemaRegistry:
    """Read-only lookup over the configured TableConfigs."""

    def __init__(self, configs: dict[str, TableConfig], checksum: str = ""):
        self._configs = dict(configs)
        self.checksum = checksum

    @classmethod
    def from_file(cls, path: Path | None = None) -> SchemaRegistry:
        configs, checksum = load_table_configs(path)
        return cls(configs, checksum)

    @classmethod
    def from_dict(cls, data: dict) -> SchemaRegistry:
        return cls(parse_registry(data))

    def get_config(self, entity: str) -> TableConfig | None:
        return self._configs.get(entity)

    def require(self, entity: str) -> TableConfig:
        """Return the config, or raise if the entity cannot be imported."""
        config = self._configs.get(entity)
        if config is None or not config.is_importable:
            raise UnknownEntityError(entity)
        return config

    def list_importable(self) -> list[TableConfig]:
        return [c for c in self._configs.values() if c.is_importable]

    def names(self) -> list[str]:
        return list(self._configs)

    def __contains__(self, entity: object) -> bool:
        return entity in self._configs


@lru_cache(maxsize=1)
def default_registry() -> SchemaRegistry:
    return SchemaRegistry.from_file()


__all__ = ["SchemaRegistry", "default_registry"]
