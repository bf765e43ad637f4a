"""Database layer - engine, base classes and transaction scopes."""

from approval_kernel.db.base import Base, IdentityInteger, TrackedBase
from approval_kernel.db.engine import create_tables, get_engine, get_session_factory
from approval_kernel.db.transaction import (
    ScopeState,
    TransactionManager,
    TransactionScope,
)

__all__ = [
    "Base",
    "IdentityInteger",
    "ScopeState",
    "TrackedBase",
    "TransactionManager",
    "TransactionScope",
    "create_tables",
    "get_engine",
    "get_session_factory",
]
