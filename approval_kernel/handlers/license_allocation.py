"""
LICENSE_ALLOCATION handler.

License seats are allocated by the license screens directly; an approved or
rejected LICENSE_ALLOCATION request changes nothing but the request itself.
The handler exists so dispatch stays total over ReferenceType, and logs a
warning so the gap is visible in operations.
"""

from __future__ import annotations

from approval_kernel.domain.approval import ReferenceType
from approval_kernel.handlers.base import ApprovalSideEffectHandler, SideEffectContext
from approval_kernel.logging_config import get_logger

logger = get_logger("handlers.license_allocation")


class LicenseAllocationHandler(ApprovalSideEffectHandler):
    reference_type = ReferenceType.LICENSE_ALLOCATION

    def apply(self, context: SideEffectContext) -> None:
        self._log_noop(context, "apply")

    def compensate(self, context: SideEffectContext) -> None:
        self._log_noop(context, "compensate")

    @staticmethod
    def _log_noop(context: SideEffectContext, phase: str) -> None:
        logger.warning(
            "license_allocation_side_effect_skipped",
            extra={
                "approval_request_id": context.request.id,
                "license_id": context.reference_id,
                "phase": phase,
            },
        )
