"""
ApprovalSideEffectHandler -- per-reference-type side effects of a decision.

Responsibility:
    One handler class per ReferenceType.  ``apply`` runs the forward effect
    when a request is approved; ``compensate`` runs the reverse effect when
    it is rejected.

Architecture position:
    Kernel > Handlers.  Invoked by ApprovalOrchestrator INSIDE the same
    TransactionScope that writes the status change, before commit.

Invariants enforced:
    - Handlers never commit.  Every write goes through a collaborator bound
      to ``context.scope``, so a failure anywhere rolls back both the
      status write and the side effect.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from approval_kernel.db.transaction import TransactionScope
from approval_kernel.domain.approval import ApprovalRequest, ReferenceType


@dataclass(frozen=True)
class SideEffectContext:
    """Everything a handler needs to act on one decided request."""

    request: ApprovalRequest
    acting_user_id: int
    remarks: str | None
    scope: TransactionScope

    @property
    def reference_id(self) -> int:
        return self.request.reference_id

    @property
    def reference_type(self) -> ReferenceType:
        return self.request.reference_type


class ApprovalSideEffectHandler(ABC):
    """Base class for reference-type handlers."""

    reference_type: ReferenceType

    @abstractmethod
    def apply(self, context: SideEffectContext) -> None:
        """Forward effect on approval."""

    @abstractmethod
    def compensate(self, context: SideEffectContext) -> None:
        """Reverse effect on rejection."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.reference_type.value}>"
