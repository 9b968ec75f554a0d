"""
Destination store protocol.

A RecordSink writes materialized records into the entity's table. Inserts
when the entity has no natural key; otherwise updates the row matching the
key or inserts a new one. Failures raise ``RecordWriteError``.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Any, Protocol, runtime_checkable


class WriteOutcome(str, Enum):
    INSERTED = "inserted"
    UPDATED = "updated"


@runtime_checkable
class RecordSink(Protocol):
    def write_batch(
        self,
        entity: str,
        records: Sequence[dict[str, Any]],
        upsert_key: tuple[str, ...],
    ) -> list[WriteOutcome]:
        """All-or-nothing write of one batch; one outcome per record."""
        ...

    def write_one(
        self,
        entity: str,
        record: dict[str, Any],
        upsert_key: tuple[str, ...],
    ) -> WriteOutcome:
        ...
