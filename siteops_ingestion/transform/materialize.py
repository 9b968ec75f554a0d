"""
Materialize validated row values into destination records.

Adds the site and caller context, audit timestamps, and per-entity derived
or defaulted fields, then drops every None value so the destination's own
defaults apply. Entity-specific behaviour lives in a dispatch table keyed
by entity name. ZERO I/O; time comes from the injected Clock.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

from siteops_ingestion.domain.types import ImportContext, TableConfig
from siteops_kernel.domain.clock import Clock

T = TypeVar("T")

DEFAULT_BATCH_SIZE = 50


def _number(value: Any) -> float | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _stamp(record: dict[str, Any], now: str, *, updated: bool = True) -> None:
    record["created_at"] = now
    if updated:
        record["updated_at"] = now


# -----------------------------------------------------------------------------
# Per-entity handlers
# -----------------------------------------------------------------------------


def _daily_attendance(record: dict[str, Any], context: ImportContext, clock: Clock) -> None:
    if not record.get("daily_earnings"):
        work_days = _number(record.get("work_days"))
        rate = _number(record.get("daily_rate_applied"))
        if work_days and rate:
            record["daily_earnings"] = work_days * rate
    record["entered_by"] = context.caller_name
    record["recorded_by_user_id"] = str(context.caller_id)
    _stamp(record, clock.now().isoformat())


def _market_laborer_attendance(
    record: dict[str, Any], context: ImportContext, clock: Clock
) -> None:
    count = _number(record.get("count"))
    if not record.get("total_cost"):
        rate = _number(record.get("rate_per_person"))
        if count and rate:
            record["total_cost"] = count * rate * (_number(record.get("work_days")) or 1)
    snacks = _number(record.get("snacks_per_person"))
    if snacks and count:
        record["total_snacks"] = snacks * count
    record["entered_by"] = context.caller_name
    record["entered_by_user_id"] = str(context.caller_id)
    _stamp(record, clock.now().isoformat())


def _expenses(record: dict[str, Any], context: ImportContext, clock: Clock) -> None:
    record["entered_by"] = context.caller_name
    record["entered_by_user_id"] = str(context.caller_id)
    _stamp(record, clock.now().isoformat())
    if not record.get("module"):
        record["module"] = "general"


def _labor_payments(record: dict[str, Any], context: ImportContext, clock: Clock) -> None:
    now = clock.now()
    record["recorded_by"] = context.caller_name
    record["recorded_by_user_id"] = str(context.caller_id)
    _stamp(record, now.isoformat(), updated=False)
    if not record.get("payment_date"):
        record["payment_date"] = now.date().isoformat()


def _laborers(record: dict[str, Any], context: ImportContext, clock: Clock) -> None:
    _stamp(record, clock.now().isoformat())
    if not record.get("status"):
        record["status"] = "active"


def _advances(record: dict[str, Any], context: ImportContext, clock: Clock) -> None:
    record["given_by"] = str(context.caller_id)
    _stamp(record, clock.now().isoformat())
    if not record.get("deduction_status"):
        record["deduction_status"] = "pending"
    if record.get("deducted_amount") is None:
        record["deducted_amount"] = 0


def _default(record: dict[str, Any], context: ImportContext, clock: Clock) -> None:
    _stamp(record, clock.now().isoformat())


Materializer = Callable[[dict[str, Any], ImportContext, Clock], None]

MATERIALIZERS: dict[str, Materializer] = {
    "daily_attendance": _daily_attendance,
    "market_laborer_attendance": _market_laborer_attendance,
    "expenses": _expenses,
    "labor_payments": _labor_payments,
    "laborers": _laborers,
    "advances": _advances,
}


def materialize(
    values: Mapping[str, Any],
    table: TableConfig,
    context: ImportContext,
    clock: Clock,
) -> dict[str, Any]:
    """Build the destination record for one row. Pure apart from the clock."""
    record = dict(values)
    if table.requires_site and context.site_id:
        record["site_id"] = context.site_id

    MATERIALIZERS.get(table.name, _default)(record, context, clock)

    return {k: v for k, v in record.items() if v is not None}


def split_into_batches(items: Sequence[T], size: int = DEFAULT_BATCH_SIZE) -> list[list[T]]:
    if size < 1:
        raise ValueError(f"Batch size must be positive, got {size}")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


@dataclass(frozen=True)
class UpsertConfig:
    can_upsert: bool
    conflict_columns: tuple[str, ...] = ()


def upsert_config(table: TableConfig) -> UpsertConfig:
    if not table.upsert_key:
        return UpsertConfig(can_upsert=False)
    return UpsertConfig(can_upsert=True, conflict_columns=table.upsert_key)
