"""
ManagerResolver -- resolves the single approver to notify for a new request.

Responsibility:
    Walks a short read-only chain through the EmployeeDirectory:

        beneficiary (assigned_to_employee_id) or requester's employee record
            -> manager_id
            -> manager's ApproverContact

Invariants enforced:
    - Pure lookup: no writes, no exceptions for missing data.  Any broken
      link (no employee, no manager, manager without email) yields None and
      an ``approver_not_resolved`` log line naming the broken link.

Failure modes:
    - Only infrastructure errors from the directory (e.g. a lost DB
      connection) propagate.  The orchestrator calls this inside its
      best-effort side channel, so even those never block initiation.
"""

from __future__ import annotations

from approval_kernel.domain.approval import ApproverContact
from approval_kernel.domain.collaborators import EmployeeDirectory
from approval_kernel.logging_config import get_logger

logger = get_logger("services.manager_resolution")


class ManagerResolver:
    """Resolve an approver contact from an EmployeeDirectory."""

    def __init__(self, directory: EmployeeDirectory):
        self._directory = directory

    def resolve_approver(
        self,
        requester_id: int,
        assigned_to_employee_id: int | None = None,
    ) -> ApproverContact | None:
        if assigned_to_employee_id is not None:
            employee = self._directory.find_by_id(assigned_to_employee_id)
            source = "assigned_employee"
        else:
            employee = self._directory.find_by_user_id(requester_id)
            source = "requester"

        if employee is None:
            return self._not_resolved(
                requester_id, assigned_to_employee_id, f"{source}_not_found",
            )

        if employee.manager_id is None:
            return self._not_resolved(
                requester_id, assigned_to_employee_id, "no_manager",
            )

        manager = self._directory.find_manager_of(employee.id)
        if manager is None:
            return self._not_resolved(
                requester_id, assigned_to_employee_id, "manager_not_found",
            )

        if not manager.email:
            return self._not_resolved(
                requester_id, assigned_to_employee_id, "manager_without_email",
            )

        return ApproverContact(
            email=manager.email,
            name=manager.display_name,
            employee_id=manager.id,
            user_id=manager.user_id,
        )

    def _not_resolved(
        self,
        requester_id: int,
        assigned_to_employee_id: int | None,
        reason: str,
    ) -> None:
        logger.info(
            "approver_not_resolved",
            extra={
                "requester_id": requester_id,
                "assigned_to_employee_id": assigned_to_employee_id,
                "reason": reason,
            },
        )
        return None
