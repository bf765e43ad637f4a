"""
SQL-backed default collaborators for ticket and purchase-order side effects.

TicketStatusService and PurchaseOrderStatusService satisfy the
TicketStatusUpdater and PurchaseOrderUpdater protocols.  Both flush in the
caller's transaction, so a failed approval rolls their writes back with the
status change.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from approval_kernel.domain.clock import Clock, SystemClock
from approval_kernel.domain.collaborators import PurchaseOrderStatus, TicketStatus
from approval_kernel.exceptions import PurchaseOrderNotFoundError, TicketNotFoundError
from approval_kernel.logging_config import get_logger
from approval_kernel.models.purchase_order import PurchaseOrder
from approval_kernel.models.ticket import Ticket
from approval_kernel.services.base import BaseService

logger = get_logger("services.reference_updaters")

_RESOLVED_TICKET_STATUSES = frozenset({TicketStatus.RESOLVED, TicketStatus.CLOSED})


class TicketStatusService(BaseService[Ticket]):
    """Set ticket status; stamps ``resolved_at`` for RESOLVED/CLOSED."""

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()

    def set_status(self, ticket_id: int, status: TicketStatus) -> None:
        ticket = self.session.execute(
            select(Ticket).where(Ticket.id == ticket_id).with_for_update()
        ).scalar_one_or_none()
        if ticket is None:
            raise TicketNotFoundError(ticket_id)

        status = TicketStatus(status)
        previous = ticket.status
        ticket.status = status.value
        if status in _RESOLVED_TICKET_STATUSES:
            ticket.resolved_at = self._clock.now()
        self.session.flush()

        logger.info(
            "ticket_status_changed",
            extra={
                "ticket_id": ticket_id,
                "from_status": previous,
                "to_status": status.value,
            },
        )


class PurchaseOrderStatusService(BaseService[PurchaseOrder]):
    """Set purchase-order status."""

    def set_status(self, purchase_order_id: int, status: PurchaseOrderStatus) -> None:
        po = self.session.execute(
            select(PurchaseOrder)
            .where(PurchaseOrder.id == purchase_order_id)
            .with_for_update()
        ).scalar_one_or_none()
        if po is None:
            raise PurchaseOrderNotFoundError(purchase_order_id)

        status = PurchaseOrderStatus(status)
        previous = po.status
        po.status = status.value
        self.session.flush()

        logger.info(
            "purchase_order_status_changed",
            extra={
                "purchase_order_id": purchase_order_id,
                "po_number": po.po_number,
                "from_status": previous,
                "to_status": status.value,
            },
        )
