"""
Reference data access for lookup resolution.

A ReferenceSource returns the candidate rows of one lookup target (already
filtered by the target's equality filters and, for site-scoped targets, by
site). Tests substitute an in-memory source; production reads the reference
tables with SQLAlchemy Core.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import sqlalchemy as sa
from sqlalchemy.orm import Session

from siteops_ingestion.domain.types import LookupTarget
from siteops_kernel.logging_config import get_logger

logger = get_logger("ingestion.reference")


@dataclass(frozen=True)
class ReferenceEntry:
    """One candidate: its id, display name, and any alternate match keys."""

    id: str
    name: str
    alternates: tuple[str, ...] = ()


@runtime_checkable
class ReferenceSource(Protocol):
    def fetch(self, target: LookupTarget, site_id: str | None) -> list[ReferenceEntry]:
        ...


class SqlReferenceSource:
    """Reads lookup candidates from the reference tables of a SQL database."""

    def __init__(self, session: Session):
        self._session = session

    def fetch(self, target: LookupTarget, site_id: str | None) -> list[ReferenceEntry]:
        if target.site_scoped and not site_id:
            return []

        selected = ["id", target.match_field, *target.alternate_fields]
        filter_columns = [name for name, _ in target.filters]
        if target.site_scoped:
            filter_columns.append("site_id")
        columns = list(dict.fromkeys(selected + filter_columns))

        tbl = sa.table(target.table, *(sa.column(c) for c in columns))
        stmt = sa.select(*(tbl.c[c] for c in dict.fromkeys(selected)))
        for name, value in target.filters:
            stmt = stmt.where(tbl.c[name] == value)
        if target.site_scoped:
            stmt = stmt.where(tbl.c.site_id == site_id)

        entries = []
        for row in self._session.execute(stmt).mappings():
            name = row[target.match_field]
            if not name:
                continue
            alternates = tuple(
                str(row[a]) for a in target.alternate_fields if row[a]
            )
            entries.append(ReferenceEntry(id=str(row["id"]), name=str(name), alternates=alternates))

        logger.debug(
            "reference_rows_loaded",
            extra={"table": target.table, "count": len(entries)},
        )
        return entries
