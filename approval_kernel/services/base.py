"""
BaseService -- common root of the write-side services.

A service is constructed per TransactionScope with the scope's session
(``scope.repository(Kind)``).  It writes with ``flush()`` so constraint and
version-check failures surface inside the call, and leaves commit/rollback
to whoever opened the scope: the approval status write and the handler's
side effect must land in the same transaction.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from approval_kernel.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseService(ABC, Generic[ModelT]):
    """Holds the session of the enclosing TransactionScope.  Never commits."""

    def __init__(self, session: Session):
        self.session = session
