"""Write-side services of the approval kernel.

The orchestrator lives in ``approval_kernel.services.approval_orchestrator``
and is imported from there; it depends on the handlers, which depend on the
services below.
"""

from approval_kernel.services.approval_store import (
    ApprovalRequestStore,
    coerce_reference_type,
)
from approval_kernel.services.asset_allocation import AssetAllocationService
from approval_kernel.services.base import BaseService
from approval_kernel.services.employee_directory import EmployeeDirectoryService
from approval_kernel.services.manager_resolution import ManagerResolver
from approval_kernel.services.notifications import (
    LoggingEmailSink,
    PersistentNotificationSink,
    SideChannel,
    SmtpEmailSink,
)
from approval_kernel.services.reference_updaters import (
    PurchaseOrderStatusService,
    TicketStatusService,
)

__all__ = [
    "ApprovalRequestStore",
    "AssetAllocationService",
    "BaseService",
    "EmployeeDirectoryService",
    "LoggingEmailSink",
    "ManagerResolver",
    "PersistentNotificationSink",
    "PurchaseOrderStatusService",
    "SideChannel",
    "SmtpEmailSink",
    "TicketStatusService",
    "coerce_reference_type",
]
