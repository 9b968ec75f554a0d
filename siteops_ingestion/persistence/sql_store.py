"""
SqlRecordStore -- RecordSink over a SQLAlchemy session.

Destination tables are addressed with lightweight ``sa.table()`` constructs
built from each record's keys, so the store needs no ORM mapping of the
operational schema. Every write runs inside its own SAVEPOINT: a failed
batch or record rolls back alone and leaves the outer transaction usable.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from siteops_ingestion.persistence.base import WriteOutcome
from siteops_kernel.exceptions import RecordWriteError
from siteops_kernel.logging_config import get_logger

logger = get_logger("ingestion.sql_store")


def _reason(exc: SQLAlchemyError) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


class SqlRecordStore:
    def __init__(self, session: Session):
        self._session = session

    def write_batch(
        self,
        entity: str,
        records: Sequence[dict[str, Any]],
        upsert_key: tuple[str, ...],
    ) -> list[WriteOutcome]:
        savepoint = self._session.begin_nested()
        try:
            outcomes = [self._write(entity, r, upsert_key) for r in records]
        except SQLAlchemyError as exc:
            savepoint.rollback()
            raise RecordWriteError(entity, _reason(exc)) from exc
        savepoint.commit()
        return outcomes

    def write_one(
        self,
        entity: str,
        record: dict[str, Any],
        upsert_key: tuple[str, ...],
    ) -> WriteOutcome:
        return self.write_batch(entity, [record], upsert_key)[0]

    def _write(
        self, entity: str, record: dict[str, Any], upsert_key: tuple[str, ...]
    ) -> WriteOutcome:
        columns = list(dict.fromkeys([*record, *upsert_key]))
        tbl = sa.table(entity, *(sa.column(c) for c in columns))

        if upsert_key and all(record.get(k) is not None for k in upsert_key):
            match = sa.and_(*(tbl.c[k] == record[k] for k in upsert_key))
            existing = self._session.execute(
                sa.select(sa.literal(1)).select_from(tbl).where(match).limit(1)
            ).first()
            if existing is not None:
                # created_at belongs to the original row.
                changes = {k: v for k, v in record.items() if k != "created_at"}
                self._session.execute(sa.update(tbl).where(match).values(**changes))
                return WriteOutcome.UPDATED

        self._session.execute(sa.insert(tbl).values(**record))
        return WriteOutcome.INSERTED
