"""Minimal ticket table used by the default TicketStatusUpdater."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from approval_kernel.db.base import TrackedBase
from approval_kernel.domain.collaborators import TicketStatus


class Ticket(TrackedBase):
    __tablename__ = "tickets"

    company_id: Mapped[int] = mapped_column(nullable=False)
    subject: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=TicketStatus.OPEN.value,
    )
    resolved_at: Mapped[datetime | None] = mapped_column(nullable=True)

    def __repr__(self) -> str:
        return f"<Ticket {self.id} status={self.status}>"
