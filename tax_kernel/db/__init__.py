"""Database layer - engine, base classes, and types."""

from tax_kernel.db.base import UUID, Base, TenantOwnedMixin, TrackedBase, UUIDString
from tax_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    reset_engine,
    session_scope,
)

__all__ = [
    "get_engine",
    "get_session",
    "init_engine_from_url",
    "reset_engine",
    "session_scope",
    "create_tables",
    "drop_tables",
    "Base",
    "TrackedBase",
    "TenantOwnedMixin",
    "UUIDString",
    "UUID",
]
