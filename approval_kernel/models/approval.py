"""
Module: approval_kernel.models.approval
Responsibility: ORM persistence for approval requests.

Architecture position: Kernel > Models.  May import from db/base.py,
    domain/ (for DTO conversion) and exceptions.py only.

Invariants enforced:
    - Status values limited by a DB check constraint; transition rules are
      enforced by ApprovalRequestStore.
    - ``version`` is SQLAlchemy's version_id_col: every UPDATE carries
      ``WHERE version = :loaded``, so a request resolved by a concurrent
      transaction cannot be resolved again from a stale read.
    - Append-mostly: rows are never deleted (ORM before_delete listener).

Failure modes:
    - StaleDataError on flush when the version check fails (translated to
      ConcurrentTransitionError by the store).
    - ImmutabilityViolationError on DELETE.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, Index, Integer, String, Text, event
from sqlalchemy.orm import Mapped, mapped_column

from approval_kernel.db.base import TrackedBase
from approval_kernel.domain.approval import (
    ApprovalRequest,
    ApprovalStatus,
    ReferenceType,
)
from approval_kernel.exceptions import ImmutabilityViolationError


class ApprovalRequestModel(TrackedBase):
    """Persistent approval request.

    Contract:
        Created PENDING; mutated exactly once to APPROVED or REJECTED,
        at which point action_by_user_id/action_at/remarks are stamped.
    """

    __tablename__ = "approval_requests"

    __table_args__ = (
        CheckConstraint(
            "status IN ('PENDING', 'APPROVED', 'REJECTED')",
            name="ck_approval_requests_valid_status",
        ),
        CheckConstraint(
            "reference_type IN ('TICKET', 'ASSET_ALLOCATION', "
            "'LICENSE_ALLOCATION', 'PURCHASE_ORDER')",
            name="ck_approval_requests_valid_reference_type",
        ),
        # Pending/history listings per tenant
        Index(
            "ix_approval_requests_company_status",
            "company_id", "status", "created_at",
        ),
        Index(
            "ix_approval_requests_reference",
            "reference_type", "reference_id",
        ),
    )

    reference_type: Mapped[str] = mapped_column(String(32), nullable=False)
    reference_id: Mapped[int] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=ApprovalStatus.PENDING.value,
    )
    requester_id: Mapped[int] = mapped_column(nullable=False)
    company_id: Mapped[int] = mapped_column(nullable=False)
    assigned_to_employee_id: Mapped[int | None] = mapped_column(nullable=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    action_by_user_id: Mapped[int | None] = mapped_column(nullable=True)
    action_at: Mapped[datetime | None] = mapped_column(nullable=True)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return (
            f"<ApprovalRequest {self.id} "
            f"{self.reference_type}:{self.reference_id} "
            f"status={self.status}>"
        )

    def to_dto(self) -> ApprovalRequest:
        """Convert ORM model to frozen domain DTO."""
        return ApprovalRequest(
            id=self.id,
            reference_type=ReferenceType(self.reference_type),
            reference_id=self.reference_id,
            status=ApprovalStatus(self.status),
            requester_id=self.requester_id,
            company_id=self.company_id,
            description=self.description,
            assigned_to_employee_id=self.assigned_to_employee_id,
            action_by_user_id=self.action_by_user_id,
            action_at=self.action_at,
            remarks=self.remarks,
            created_at=self.created_at,
        )


@event.listens_for(ApprovalRequestModel, "before_delete")
def prevent_approval_request_delete(mapper, connection, target):
    """Approval requests are the audit trail -- never deleted."""
    raise ImmutabilityViolationError(
        entity_type="ApprovalRequest",
        entity_id=target.id,
        reason="Approval requests are never deleted",
    )
