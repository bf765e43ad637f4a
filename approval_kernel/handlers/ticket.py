"""TICKET handler: approval moves the ticket to IN_PROGRESS."""

from __future__ import annotations

from typing import Callable

from approval_kernel.db.transaction import TransactionScope
from approval_kernel.domain.approval import ReferenceType
from approval_kernel.domain.collaborators import TicketStatus, TicketStatusUpdater
from approval_kernel.handlers.base import ApprovalSideEffectHandler, SideEffectContext
from approval_kernel.logging_config import get_logger
from approval_kernel.services.reference_updaters import TicketStatusService

logger = get_logger("handlers.ticket")


def _default_updater(scope: TransactionScope) -> TicketStatusUpdater:
    return scope.repository(TicketStatusService)


class TicketHandler(ApprovalSideEffectHandler):
    reference_type = ReferenceType.TICKET

    def __init__(
        self,
        updater_factory: Callable[[TransactionScope], TicketStatusUpdater] | None = None,
    ):
        self._updater_factory = updater_factory or _default_updater

    def apply(self, context: SideEffectContext) -> None:
        updater = self._updater_factory(context.scope)
        updater.set_status(context.reference_id, TicketStatus.IN_PROGRESS)

    def compensate(self, context: SideEffectContext) -> None:
        # A rejected ticket stays where it was; the requester is notified.
        logger.debug(
            "ticket_rejection_no_side_effect",
            extra={"ticket_id": context.reference_id},
        )
