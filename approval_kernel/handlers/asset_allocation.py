"""
ASSET_ALLOCATION handler.

Approval assigns the asset (``reference_id``) to the request's beneficiary:
``assigned_to_employee_id`` when set, otherwise the employee record linked
to the requester's user account.  The asset and the assigned employee must
belong to the request's company; anything else is reported as not found.
Rejection releases the asset back to AVAILABLE, undoing any tentative
IN_USE marking made when the request was raised.
"""

from __future__ import annotations

from typing import Callable

from approval_kernel.db.transaction import TransactionScope
from approval_kernel.domain.approval import ReferenceType
from approval_kernel.domain.collaborators import AssetAssigner, EmployeeDirectory
from approval_kernel.exceptions import EmployeeNotFoundError, SideEffectFailure
from approval_kernel.handlers.base import ApprovalSideEffectHandler, SideEffectContext
from approval_kernel.services.asset_allocation import AssetAllocationService
from approval_kernel.services.employee_directory import EmployeeDirectoryService


def _default_assigner(scope: TransactionScope) -> AssetAssigner:
    return scope.repository(AssetAllocationService)


def _default_directory(scope: TransactionScope) -> EmployeeDirectory:
    return scope.repository(EmployeeDirectoryService)


class AssetAllocationHandler(ApprovalSideEffectHandler):
    reference_type = ReferenceType.ASSET_ALLOCATION

    def __init__(
        self,
        assigner_factory: Callable[[TransactionScope], AssetAssigner] | None = None,
        directory_factory: Callable[[TransactionScope], EmployeeDirectory] | None = None,
    ):
        self._assigner_factory = assigner_factory or _default_assigner
        self._directory_factory = directory_factory or _default_directory

    def apply(self, context: SideEffectContext) -> None:
        employee_id = self._beneficiary(context)
        self._assigner_factory(context.scope).assign(
            context.reference_id,
            employee_id,
            context.acting_user_id,
            context.remarks,
            company_id=context.request.company_id,
        )

    def compensate(self, context: SideEffectContext) -> None:
        self._assigner_factory(context.scope).release(
            context.reference_id,
            context.remarks,
            company_id=context.request.company_id,
        )

    def _beneficiary(self, context: SideEffectContext) -> int:
        request = context.request
        directory = self._directory_factory(context.scope)
        if request.assigned_to_employee_id is not None:
            assignee = directory.find_by_id(request.assigned_to_employee_id)
            if assignee is None or assignee.company_id != request.company_id:
                raise EmployeeNotFoundError(request.assigned_to_employee_id)
            return assignee.id

        employee = directory.find_by_user_id(
            request.requester_id
        )
        if employee is None:
            raise SideEffectFailure(
                self.reference_type.value,
                context.reference_id,
                f"no employee to assign to: request {request.id} has no "
                f"assigned_to_employee_id and user {request.requester_id} "
                "has no employee record",
            )
        return employee.id
