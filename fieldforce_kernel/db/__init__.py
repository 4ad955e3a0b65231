"""Database layer - engine, session management and declarative base."""

from fieldforce_kernel.db.base import UUID, Base, UUIDString
from fieldforce_kernel.db.engine import (
    create_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)

__all__ = [
    "init_engine_from_url",
    "get_session",
    "create_tables",
    "reset_engine",
    "Base",
    "UUIDString",
    "UUID",
]
