"""Database layer - engine, base classes and types."""

from campaign_kernel.db.base import UUID, Base, ExactDecimal, TrackedBase, UUIDString
from campaign_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session,
    session_scope,
)
from campaign_kernel.db.types import round_money, to_decimal

__all__ = [
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "Base",
    "TrackedBase",
    "UUIDString",
    "ExactDecimal",
    "UUID",
    "round_money",
    "to_decimal",
]
