"""
Module: approval_kernel.models.employee
Responsibility: Minimal employee directory table backing manager resolution
    and display names.  Employee CRUD lives outside the kernel.
"""

from __future__ import annotations

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from approval_kernel.db.base import TrackedBase
from approval_kernel.domain.collaborators import EmployeeRecord


class Employee(TrackedBase):
    """An employee; ``user_id`` links to a login account when one exists."""

    __tablename__ = "employees"

    __table_args__ = (
        Index("ix_employees_user_id", "user_id"),
        Index("ix_employees_company", "company_id"),
    )

    company_id: Mapped[int] = mapped_column(nullable=False)
    user_id: Mapped[int | None] = mapped_column(nullable=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    manager_id: Mapped[int | None] = mapped_column(
        ForeignKey("employees.id"), nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Employee {self.id} {self.first_name} {self.last_name}>"

    def to_dto(self) -> EmployeeRecord:
        return EmployeeRecord(
            id=self.id,
            company_id=self.company_id,
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
            user_id=self.user_id,
            manager_id=self.manager_id,
        )
