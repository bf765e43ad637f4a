"""
Approval domain types (``approval_kernel.domain.approval``).

Responsibility
--------------
Pure value objects for the approval workflow engine: the request lifecycle
state machine, reference types, the frozen request snapshot returned by the
store, the denormalized view returned to listing screens, and the resolved
approver contact.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  No imports from
``db/``, ``models/``, ``services/`` or ``selectors/``.

Invariants enforced
-------------------
* ``APPROVAL_TRANSITIONS`` defines the only valid status transitions:
  PENDING -> APPROVED and PENDING -> REJECTED.  Both targets are terminal;
  re-entering a terminal state is an error, never a no-op.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class ReferenceType(str, Enum):
    """Kind of domain entity an approval request concerns."""

    TICKET = "TICKET"
    ASSET_ALLOCATION = "ASSET_ALLOCATION"
    LICENSE_ALLOCATION = "LICENSE_ALLOCATION"
    PURCHASE_ORDER = "PURCHASE_ORDER"


class ApprovalStatus(str, Enum):
    """Approval request lifecycle states."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


APPROVAL_TRANSITIONS: dict[ApprovalStatus, frozenset[ApprovalStatus]] = {
    ApprovalStatus.PENDING: frozenset({
        ApprovalStatus.APPROVED,
        ApprovalStatus.REJECTED,
    }),
    ApprovalStatus.APPROVED: frozenset(),
    ApprovalStatus.REJECTED: frozenset(),
}

TERMINAL_APPROVAL_STATUSES: frozenset[ApprovalStatus] = frozenset({
    ApprovalStatus.APPROVED,
    ApprovalStatus.REJECTED,
})


def is_valid_transition(current: ApprovalStatus, new: ApprovalStatus) -> bool:
    """Return True if ``current -> new`` is an allowed lifecycle edge."""
    return new in APPROVAL_TRANSITIONS.get(current, frozenset())


@dataclass(frozen=True)
class ApprovalRequest:
    """Immutable snapshot of a persisted approval request."""

    id: int
    reference_type: ReferenceType
    reference_id: int
    status: ApprovalStatus
    requester_id: int
    company_id: int
    description: str
    assigned_to_employee_id: int | None = None
    action_by_user_id: int | None = None
    action_at: datetime | None = None
    remarks: str | None = None
    created_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == ApprovalStatus.PENDING

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_APPROVAL_STATUSES


@dataclass(frozen=True)
class ApprovalView:
    """Denormalized listing row: request fields plus display names.

    ``requester_name`` is the display name of the employee linked to the
    requester's user account; ``manager_name`` is that employee's manager.
    Either is None when the directory has no matching record.
    """

    id: int
    reference_type: ReferenceType
    reference_id: int
    status: ApprovalStatus
    requester_id: int
    company_id: int
    description: str
    assigned_to_employee_id: int | None
    action_by_user_id: int | None
    action_at: datetime | None
    remarks: str | None
    created_at: datetime | None
    requester_name: str | None = None
    manager_name: str | None = None


@dataclass(frozen=True)
class ApproverContact:
    """Resolved notification recipient for a new approval request."""

    email: str
    name: str
    employee_id: int
    user_id: int | None = None
