"""PURCHASE_ORDER handler: approval/rejection mirrored onto the PO status."""

from __future__ import annotations

from typing import Callable

from approval_kernel.db.transaction import TransactionScope
from approval_kernel.domain.approval import ReferenceType
from approval_kernel.domain.collaborators import (
    PurchaseOrderStatus,
    PurchaseOrderUpdater,
)
from approval_kernel.handlers.base import ApprovalSideEffectHandler, SideEffectContext
from approval_kernel.services.reference_updaters import PurchaseOrderStatusService


def _default_updater(scope: TransactionScope) -> PurchaseOrderUpdater:
    return scope.repository(PurchaseOrderStatusService)


class PurchaseOrderHandler(ApprovalSideEffectHandler):
    reference_type = ReferenceType.PURCHASE_ORDER

    def __init__(
        self,
        updater_factory: Callable[[TransactionScope], PurchaseOrderUpdater] | None = None,
    ):
        self._updater_factory = updater_factory or _default_updater

    def apply(self, context: SideEffectContext) -> None:
        self._updater_factory(context.scope).set_status(
            context.reference_id, PurchaseOrderStatus.APPROVED,
        )

    def compensate(self, context: SideEffectContext) -> None:
        self._updater_factory(context.scope).set_status(
            context.reference_id, PurchaseOrderStatus.REJECTED,
        )
