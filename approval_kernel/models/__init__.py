"""ORM models for the approval kernel."""

from approval_kernel.models.approval import ApprovalRequestModel
from approval_kernel.models.asset import Asset, AssetAssignment
from approval_kernel.models.employee import Employee
from approval_kernel.models.notification import Notification
from approval_kernel.models.purchase_order import PurchaseOrder
from approval_kernel.models.ticket import Ticket

__all__ = [
    "ApprovalRequestModel",
    "Asset",
    "AssetAssignment",
    "Employee",
    "Notification",
    "PurchaseOrder",
    "Ticket",
]
