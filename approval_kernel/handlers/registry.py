"""HandlerRegistry -- ReferenceType to ApprovalSideEffectHandler dispatch."""

from __future__ import annotations

from approval_kernel.domain.approval import ReferenceType
from approval_kernel.exceptions import HandlerNotRegisteredError
from approval_kernel.handlers.base import ApprovalSideEffectHandler


class HandlerRegistry:
    """Instance-level registry; one handler per reference type."""

    def __init__(self) -> None:
        self._handlers: dict[ReferenceType, ApprovalSideEffectHandler] = {}

    def register(
        self,
        handler: ApprovalSideEffectHandler,
        *,
        replace: bool = False,
    ) -> None:
        ref_type = handler.reference_type
        if ref_type in self._handlers and not replace:
            existing = self._handlers[ref_type]
            raise ValueError(
                f"Handler already registered for {ref_type.value}: "
                f"{existing.__class__.__name__}"
            )
        self._handlers[ref_type] = handler

    def unregister(self, reference_type: ReferenceType) -> None:
        self._handlers.pop(reference_type, None)

    def get(self, reference_type: ReferenceType | str) -> ApprovalSideEffectHandler:
        """
        Return the handler for ``reference_type``.

        Raises:
            HandlerNotRegisteredError: If nothing is registered for it.
        """
        key = getattr(reference_type, "value", reference_type)
        for ref_type, handler in self._handlers.items():
            if ref_type.value == key:
                return handler
        raise HandlerNotRegisteredError(str(key))

    def registered_types(self) -> frozenset[ReferenceType]:
        return frozenset(self._handlers)

    def __contains__(self, reference_type: object) -> bool:
        return reference_type in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)


def default_registry() -> HandlerRegistry:
    """Registry with the SQL-backed handler for every ReferenceType."""
    from approval_kernel.handlers.asset_allocation import AssetAllocationHandler
    from approval_kernel.handlers.license_allocation import LicenseAllocationHandler
    from approval_kernel.handlers.purchase_order import PurchaseOrderHandler
    from approval_kernel.handlers.ticket import TicketHandler

    registry = HandlerRegistry()
    registry.register(TicketHandler())
    registry.register(AssetAllocationHandler())
    registry.register(PurchaseOrderHandler())
    registry.register(LicenseAllocationHandler())
    return registry
