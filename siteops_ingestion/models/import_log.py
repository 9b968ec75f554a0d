"""
ImportLogModel -- one row per completed import request.

Records what was imported, by whom, for which site, and the disposition
counts. Imports from siteops_kernel.db.base only.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from siteops_kernel.db.base import TrackedBase


class ImportLogModel(TrackedBase):
    __tablename__ = "import_logs"

    entity: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    site_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    caller_name: Mapped[str] = mapped_column(String(200), nullable=False)
    total: Mapped[int] = mapped_column(default=0, nullable=False)
    inserted: Mapped[int] = mapped_column(default=0, nullable=False)
    updated: Mapped[int] = mapped_column(default=0, nullable=False)
    skipped: Mapped[int] = mapped_column(default=0, nullable=False)
    errors: Mapped[int] = mapped_column(default=0, nullable=False)
    error_details: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)
