"""
EmployeeDirectoryService -- SQL-backed EmployeeDirectory.

Read-only lookups over the ``employees`` table used by manager resolution
and by the listing selector for display names.  Every lookup returns None
for missing data instead of raising.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from approval_kernel.domain.collaborators import EmployeeRecord
from approval_kernel.models.employee import Employee


class EmployeeDirectoryService:
    """Employee lookups bound to one session."""

    def __init__(self, session: Session):
        self.session = session

    def find_by_id(self, employee_id: int) -> EmployeeRecord | None:
        employee = self.session.get(Employee, employee_id)
        return employee.to_dto() if employee is not None else None

    def find_by_user_id(self, user_id: int) -> EmployeeRecord | None:
        # A user account links to at most one employee; take the oldest if
        # the directory holds duplicates.
        employee = self.session.execute(
            select(Employee)
            .where(Employee.user_id == user_id)
            .order_by(Employee.id)
            .limit(1)
        ).scalar_one_or_none()
        return employee.to_dto() if employee is not None else None

    def find_manager_of(self, employee_id: int) -> EmployeeRecord | None:
        employee = self.session.get(Employee, employee_id)
        if employee is None or employee.manager_id is None:
            return None
        return self.find_by_id(employee.manager_id)
