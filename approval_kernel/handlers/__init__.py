"""Side-effect handlers dispatched by reference type."""

from approval_kernel.handlers.asset_allocation import AssetAllocationHandler
from approval_kernel.handlers.base import ApprovalSideEffectHandler, SideEffectContext
from approval_kernel.handlers.license_allocation import LicenseAllocationHandler
from approval_kernel.handlers.purchase_order import PurchaseOrderHandler
from approval_kernel.handlers.registry import HandlerRegistry, default_registry
from approval_kernel.handlers.ticket import TicketHandler

__all__ = [
    "ApprovalSideEffectHandler",
    "AssetAllocationHandler",
    "HandlerRegistry",
    "LicenseAllocationHandler",
    "PurchaseOrderHandler",
    "SideEffectContext",
    "TicketHandler",
    "default_registry",
]
