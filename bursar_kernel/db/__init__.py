"""Database layer - engine, base classes, and immutability listeners."""

from bursar_kernel.db.base import Base, TenantScopedBase, new_id
from bursar_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    reset_engine,
    session_scope,
)

__all__ = [
    "Base",
    "TenantScopedBase",
    "new_id",
    "init_engine_from_url",
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "drop_tables",
    "reset_engine",
]
