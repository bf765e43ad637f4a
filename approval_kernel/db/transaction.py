"""
Module: approval_kernel.db.transaction
Responsibility: Explicit unit-of-work abstraction.  A TransactionScope binds
    one SQLAlchemy session (one connection, one database transaction) and
    hands out repositories/services that read and write inside it.
Architecture position: Kernel > DB.  Services never commit; the orchestrator
    owns the scope and finalizes it.

Invariants enforced:
    - Exactly-once finalization: commit() or rollback() must be called once.
      Calling either a second time, or close() on a scope that was never
      finalized, raises TransactionScopeError.  An un-finalized scope is
      rolled back before the error is raised, so no writes leak.
    - Repositories obtained from a scope share the scope's session; a
      repository is only handed out while the scope is active.

Failure modes:
    - TransactionScopeError on misuse (see above).
    - Any exception from session.commit() propagates after the scope has
      been rolled back and marked ROLLED_BACK.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, TypeVar
from uuid import uuid4

from sqlalchemy.orm import Session, sessionmaker

from approval_kernel.exceptions import TransactionScopeError
from approval_kernel.logging_config import get_logger

logger = get_logger("db.transaction")

R = TypeVar("R")

RepositoryFactory = Callable[[Session], Any]


class ScopeState(str, Enum):
    ACTIVE = "active"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class TransactionScope:
    """
    One logical transaction over one session.

    Usage (explicit)::

        scope = manager.begin()
        try:
            scope.repository(ApprovalRequestStore).add_pending(...)
            scope.commit()
        except Exception:
            scope.rollback()
            raise
        finally:
            scope.close()

    Usage (context manager -- commits on clean exit, rolls back on error)::

        with manager.begin() as scope:
            scope.repository(ApprovalRequestStore).add_pending(...)
    """

    def __init__(
        self,
        session: Session,
        factories: dict[type, RepositoryFactory] | None = None,
    ) -> None:
        self._session = session
        self._factories = factories or {}
        self._repositories: dict[type, Any] = {}
        self._state = ScopeState.ACTIVE
        self._closed = False
        self.scope_id = uuid4().hex[:12]

    @property
    def state(self) -> ScopeState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is ScopeState.ACTIVE

    @property
    def session(self) -> Session:
        return self._session

    def repository(self, kind: type[R]) -> R:
        """Return the ``kind`` repository bound to this scope (cached)."""
        self._require_active("repository")
        repo = self._repositories.get(kind)
        if repo is None:
            factory = self._factories.get(kind, kind)
            repo = factory(self._session)
            self._repositories[kind] = repo
        return repo

    def commit(self) -> None:
        self._require_active("commit")
        try:
            self._session.commit()
        except Exception:
            self._session.rollback()
            self._state = ScopeState.ROLLED_BACK
            logger.warning(
                "transaction_rolled_back",
                extra={"scope_id": self.scope_id, "reason": "commit_failed"},
                exc_info=True,
            )
            raise
        self._state = ScopeState.COMMITTED
        logger.debug("transaction_committed", extra={"scope_id": self.scope_id})

    def rollback(self) -> None:
        self._require_active("rollback")
        self._session.rollback()
        self._state = ScopeState.ROLLED_BACK
        logger.debug("transaction_rolled_back", extra={"scope_id": self.scope_id})

    def close(self) -> None:
        """Release the session.  Raises if the scope was never finalized."""
        if self._closed:
            return
        self._closed = True
        try:
            if self._state is ScopeState.ACTIVE:
                self._session.rollback()
                self._state = ScopeState.ROLLED_BACK
                logger.error(
                    "transaction_scope_abandoned",
                    extra={"scope_id": self.scope_id},
                )
                raise TransactionScopeError(
                    self.scope_id,
                    ScopeState.ACTIVE.value,
                    "scope discarded without commit or rollback",
                )
        finally:
            self._repositories.clear()
            self._session.close()

    def _require_active(self, operation: str) -> None:
        if self._closed or self._state is not ScopeState.ACTIVE:
            raise TransactionScopeError(
                self.scope_id,
                self._state.value,
                f"{operation}() called on a finalized scope",
            )

    def __enter__(self) -> TransactionScope:
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        try:
            if exc_type is not None:
                if self._state is ScopeState.ACTIVE:
                    self._session.rollback()
                    self._state = ScopeState.ROLLED_BACK
                    logger.info(
                        "transaction_rolled_back",
                        extra={
                            "scope_id": self.scope_id,
                            "reason": exc_type.__name__,
                        },
                    )
            elif self._state is ScopeState.ACTIVE:
                self.commit()
        finally:
            self._closed = True
            self._repositories.clear()
            self._session.close()
        return False


class TransactionManager:
    """
    Factory for TransactionScopes.

    Repository kinds are constructed as ``kind(session)`` unless a factory
    has been registered for them (e.g. to inject a Clock).
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory
        self._factories: dict[type, RepositoryFactory] = {}

    def register(self, kind: type, factory: RepositoryFactory) -> None:
        self._factories[kind] = factory

    def begin(self) -> TransactionScope:
        return TransactionScope(self._session_factory(), dict(self._factories))
