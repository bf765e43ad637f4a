"""
Module: approval_kernel.selectors.approval_selector
Responsibility: Listing queries behind ``get_pending_approvals`` and
    ``get_approval_history``.  Each row is an ApprovalView: the request
    fields plus the requester's display name and the approving manager's:
    the manager of ``assigned_to_employee_id`` when set, otherwise the
    requester's manager.

Invariants enforced:
    - Newest first (created_at DESC, id DESC as tie-break).
    - Pending lists PENDING only; history lists APPROVED and REJECTED.
    - Missing directory data yields None names, never an error.
"""

from __future__ import annotations

from typing import Iterable

from sqlalchemy import select

from approval_kernel.domain.approval import (
    TERMINAL_APPROVAL_STATUSES,
    ApprovalStatus,
    ApprovalView,
    ReferenceType,
)
from approval_kernel.models.approval import ApprovalRequestModel
from approval_kernel.models.employee import Employee
from approval_kernel.selectors.base import BaseSelector


def _display_name(employee: Employee | None) -> str | None:
    if employee is None:
        return None
    return f"{employee.first_name} {employee.last_name}".strip()


class ApprovalSelector(BaseSelector[ApprovalRequestModel]):
    """Read-only access to approval requests for listing screens."""

    def pending(self, company_id: int) -> list[ApprovalView]:
        return self.for_company(company_id, [ApprovalStatus.PENDING])

    def history(self, company_id: int) -> list[ApprovalView]:
        return self.for_company(
            company_id,
            sorted(TERMINAL_APPROVAL_STATUSES, key=lambda s: s.value),
        )

    def for_company(
        self,
        company_id: int,
        statuses: Iterable[ApprovalStatus],
    ) -> list[ApprovalView]:
        rows = self.session.execute(
            select(ApprovalRequestModel)
            .where(ApprovalRequestModel.company_id == company_id)
            .where(ApprovalRequestModel.status.in_([s.value for s in statuses]))
            .order_by(
                ApprovalRequestModel.created_at.desc(),
                ApprovalRequestModel.id.desc(),
            )
        ).scalars().all()
        if not rows:
            return []

        requesters = self._employees_by_user_id({r.requester_id for r in rows})
        assignees = self._employees_by_id(
            {r.assigned_to_employee_id for r in rows if r.assigned_to_employee_id is not None}
        )
        # Same priority as approver resolution: the assigned employee's
        # manager, else the requester's
        subjects = {
            row.id: (
                assignees.get(row.assigned_to_employee_id)
                if row.assigned_to_employee_id is not None
                else requesters.get(row.requester_id)
            )
            for row in rows
        }
        managers = self._employees_by_id(
            {e.manager_id for e in subjects.values() if e is not None and e.manager_id is not None}
        )

        views = []
        for row in rows:
            subject = subjects[row.id]
            manager = (
                managers.get(subject.manager_id)
                if subject is not None and subject.manager_id is not None
                else None
            )
            views.append(self._to_view(row, requesters.get(row.requester_id), manager))
        return views

    def _employees_by_user_id(self, user_ids: set[int]) -> dict[int, Employee]:
        employees = self.session.execute(
            select(Employee)
            .where(Employee.user_id.in_(user_ids))
            .order_by(Employee.id)
        ).scalars().all()
        result: dict[int, Employee] = {}
        for employee in employees:
            # Oldest record wins when a user has more than one
            result.setdefault(employee.user_id, employee)
        return result

    def _employees_by_id(self, employee_ids: set[int]) -> dict[int, Employee]:
        if not employee_ids:
            return {}
        employees = self.session.execute(
            select(Employee).where(Employee.id.in_(employee_ids))
        ).scalars().all()
        return {e.id: e for e in employees}

    @staticmethod
    def _to_view(
        row: ApprovalRequestModel,
        requester: Employee | None,
        manager: Employee | None,
    ) -> ApprovalView:
        return ApprovalView(
            id=row.id,
            reference_type=ReferenceType(row.reference_type),
            reference_id=row.reference_id,
            status=ApprovalStatus(row.status),
            requester_id=row.requester_id,
            company_id=row.company_id,
            description=row.description,
            assigned_to_employee_id=row.assigned_to_employee_id,
            action_by_user_id=row.action_by_user_id,
            action_at=row.action_at,
            remarks=row.remarks,
            created_at=row.created_at,
            requester_name=_display_name(requester),
            manager_name=_display_name(manager),
        )
