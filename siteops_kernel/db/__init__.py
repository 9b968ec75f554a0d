"""Database layer - engine and declarative base classes."""

from siteops_kernel.db.base import Base, TrackedBase, UUIDString
from siteops_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    reset_engine,
    session_scope,
)

__all__ = [
    "init_engine_from_url",
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "reset_engine",
    "Base",
    "TrackedBase",
    "UUIDString",
]
