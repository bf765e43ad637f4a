"""Minimal purchase order table used by the default PurchaseOrderUpdater."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from approval_kernel.db.base import TrackedBase
from approval_kernel.domain.collaborators import PurchaseOrderStatus


class PurchaseOrder(TrackedBase):
    __tablename__ = "purchase_orders"

    __table_args__ = (
        UniqueConstraint("po_number", name="uq_purchase_orders_po_number"),
    )

    company_id: Mapped[int] = mapped_column(nullable=False)
    po_number: Mapped[str] = mapped_column(String(50), nullable=False)
    requester_id: Mapped[int] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PurchaseOrderStatus.PENDING_APPROVAL.value,
    )
    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0"),
    )

    def __repr__(self) -> str:
        return f"<PurchaseOrder {self.po_number} status={self.status}>"
