"""
Module: approval_kernel.models.asset
Responsibility: ORM persistence for assets and the asset assignment ledger.

Invariants enforced:
    - At most one current assignment per asset: partial UNIQUE index on
      asset_assignments(asset_id) WHERE is_current.  The allocation service
      also locks the asset row, so the index only fires on a logic bug.
    - Asset ``version`` is a version_id_col, catching lost updates on
      backends without row locks.
    - Assignment rows are a historical ledger: closed, never deleted.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    event,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from approval_kernel.db.base import TrackedBase
from approval_kernel.domain.assets import AssetAssignmentRecord, AssetStatus
from approval_kernel.exceptions import ImmutabilityViolationError


class Asset(TrackedBase):
    """A physical IT asset owned by a company."""

    __tablename__ = "assets"

    __table_args__ = (
        CheckConstraint(
            "status IN ('AVAILABLE', 'IN_USE', 'MAINTENANCE', 'RETIRED')",
            name="ck_assets_valid_status",
        ),
        Index("ix_assets_company_status", "company_id", "status"),
    )

    company_id: Mapped[int] = mapped_column(nullable=False)
    serial_number: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    model_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=AssetStatus.AVAILABLE.value,
    )
    assigned_to_employee_id: Mapped[int | None] = mapped_column(nullable=True)
    previous_user_employee_id: Mapped[int | None] = mapped_column(nullable=True)
    user_assigned_date: Mapped[datetime | None] = mapped_column(nullable=True)
    last_return_date: Mapped[datetime | None] = mapped_column(nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<Asset {self.id} status={self.status} assignee={self.assigned_to_employee_id}>"

    @property
    def asset_status(self) -> AssetStatus:
        return AssetStatus(self.status)


class AssetAssignment(TrackedBase):
    """One asset-to-employee assignment; ``is_current`` while active."""

    __tablename__ = "asset_assignments"

    __table_args__ = (
        Index(
            "uq_asset_assignments_current",
            "asset_id",
            unique=True,
            postgresql_where=text("is_current"),
            sqlite_where=text("is_current = 1"),
        ),
        Index("ix_asset_assignments_asset", "asset_id", "assigned_date"),
    )

    asset_id: Mapped[int] = mapped_column(ForeignKey("assets.id"), nullable=False)
    employee_id: Mapped[int] = mapped_column(nullable=False)
    assigned_by_id: Mapped[int | None] = mapped_column(nullable=True)
    assigned_date: Mapped[datetime] = mapped_column(nullable=False)
    return_date: Mapped[datetime | None] = mapped_column(nullable=True)
    is_current: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)
    return_remarks: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<AssetAssignment {self.id} asset={self.asset_id} "
            f"employee={self.employee_id} current={self.is_current}>"
        )

    def to_dto(self) -> AssetAssignmentRecord:
        return AssetAssignmentRecord(
            id=self.id,
            asset_id=self.asset_id,
            employee_id=self.employee_id,
            assigned_by_id=self.assigned_by_id,
            assigned_date=self.assigned_date,
            return_date=self.return_date,
            is_current=self.is_current,
            remarks=self.remarks,
            return_remarks=self.return_remarks,
        )


@event.listens_for(AssetAssignment, "before_delete")
def prevent_assignment_delete(mapper, connection, target):
    """Assignment rows are closed on return/reassignment, never deleted."""
    raise ImmutabilityViolationError(
        entity_type="AssetAssignment",
        entity_id=target.id,
        reason="Assignment history is append-only",
    )
