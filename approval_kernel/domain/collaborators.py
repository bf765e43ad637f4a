"""
Outbound collaborator contracts for the approval engine.

The engine never reaches into ticket, procurement, directory or messaging
code directly.  Side-effect handlers and the side channel depend on these
structural protocols; the kernel ships SQL-backed defaults in
``approval_kernel.services`` and callers may substitute their own.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from approval_kernel.domain.assets import AssignmentOutcome, ReleaseOutcome


class TicketStatus(str, Enum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"


class PurchaseOrderStatus(str, Enum):
    DRAFT = "DRAFT"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    ORDERED = "ORDERED"
    RECEIVED = "RECEIVED"
    CANCELLED = "CANCELLED"


class NotificationType(str, Enum):
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"


@dataclass(frozen=True)
class EmployeeRecord:
    """Directory entry used by manager resolution and display names."""

    id: int
    company_id: int
    first_name: str
    last_name: str
    email: str | None = None
    user_id: int | None = None
    manager_id: int | None = None

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@runtime_checkable
class TicketStatusUpdater(Protocol):
    def set_status(self, ticket_id: int, status: TicketStatus) -> None: ...


@runtime_checkable
class PurchaseOrderUpdater(Protocol):
    def set_status(self, purchase_order_id: int, status: PurchaseOrderStatus) -> None: ...


@runtime_checkable
class AssetAssigner(Protocol):
    def assign(
        self,
        asset_id: int,
        employee_id: int,
        acting_user_id: int,
        remarks: str | None = None,
        *,
        company_id: int | None = None,
    ) -> AssignmentOutcome: ...

    def release(
        self,
        asset_id: int,
        remarks: str | None = None,
        *,
        company_id: int | None = None,
    ) -> ReleaseOutcome: ...


@runtime_checkable
class EmployeeDirectory(Protocol):
    def find_by_id(self, employee_id: int) -> EmployeeRecord | None: ...

    def find_by_user_id(self, user_id: int) -> EmployeeRecord | None: ...

    def find_manager_of(self, employee_id: int) -> EmployeeRecord | None: ...


@runtime_checkable
class NotificationSink(Protocol):
    def notify(
        self,
        user_id: int,
        title: str,
        message: str,
        category: str,
        metadata: dict[str, Any] | None = None,
    ) -> None: ...


@runtime_checkable
class EmailSink(Protocol):
    def send_approval_email(
        self,
        to_email: str,
        company_id: int,
        requester_name: str,
        description: str,
    ) -> None: ...
