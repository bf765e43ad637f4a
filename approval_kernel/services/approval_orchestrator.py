"""
ApprovalOrchestrator -- the approval workflow state machine.

Responsibility:
    Public entry points of the engine:

        initiate_approval   persist a PENDING request, then notify the approver
        approve_request     PENDING -> APPROVED + handler.apply, then notify
        reject_request      PENDING -> REJECTED + handler.compensate, then notify
        get_pending_approvals / get_approval_history   listing views

Architecture position:
    Kernel > Services -- the only component that opens TransactionScopes
    for workflow writes and the only caller of the side channel.

Invariants enforced:
    - One scope per mutating call.  The status write and the handler's
      side effect share it; a handler failure rolls back both and the
      request stays PENDING.
    - Check-then-act on the PENDING state happens under a row lock
      (ApprovalRequestStore.lock_pending) inside that scope.
    - Notifications are dispatched only after commit, and nothing on the
      notification path (approver resolution included) can raise out of
      the orchestrator.

Failure modes:
    - ValueError: unknown reference type string at initiation.
    - ApprovalRequestNotFoundError / RequestNotPendingError /
      ConcurrentTransitionError: from the store, scope rolled back.
    - HandlerNotRegisteredError: no handler for the request's type.
    - Kernel errors raised by a handler propagate unchanged; anything else
      is wrapped in SideEffectFailure with the original as ``__cause__``.
"""

from __future__ import annotations

from typing import Any, Callable

from approval_kernel.db.transaction import TransactionManager, TransactionScope
from approval_kernel.domain.approval import (
    ApprovalRequest,
    ApprovalStatus,
    ApprovalView,
    ApproverContact,
    ReferenceType,
)
from approval_kernel.domain.clock import Clock, SystemClock
from approval_kernel.domain.collaborators import EmployeeDirectory, EmployeeRecord
from approval_kernel.exceptions import ApprovalKernelError, SideEffectFailure
from approval_kernel.handlers.base import ApprovalSideEffectHandler, SideEffectContext
from approval_kernel.handlers.registry import HandlerRegistry, default_registry
from approval_kernel.logging_config import LogContext, get_logger
from approval_kernel.selectors.approval_selector import ApprovalSelector
from approval_kernel.services.approval_store import (
    ApprovalRequestStore,
    coerce_reference_type,
)
from approval_kernel.services.asset_allocation import AssetAllocationService
from approval_kernel.services.employee_directory import EmployeeDirectoryService
from approval_kernel.services.manager_resolution import ManagerResolver
from approval_kernel.services.notifications import SideChannel
from approval_kernel.services.reference_updaters import TicketStatusService

logger = get_logger("services.approval_orchestrator")


def _default_directory(scope: TransactionScope) -> EmployeeDirectory:
    return scope.repository(EmployeeDirectoryService)


class ApprovalOrchestrator:
    """
    Coordinates store, handlers and side channel for every workflow call.

    Contract:
        Stateless between calls; safe to share across threads as long as
        the TransactionManager's session factory is.
    """

    def __init__(
        self,
        transaction_manager: TransactionManager,
        registry: HandlerRegistry | None = None,
        side_channel: SideChannel | None = None,
        clock: Clock | None = None,
        directory_factory: Callable[[TransactionScope], EmployeeDirectory] | None = None,
    ):
        self._transactions = transaction_manager
        self._registry = registry if registry is not None else default_registry()
        self._side_channel = side_channel or SideChannel()
        self._clock = clock or SystemClock()
        self._directory_factory = directory_factory or _default_directory

        clock_ = self._clock
        transaction_manager.register(
            ApprovalRequestStore, lambda s: ApprovalRequestStore(s, clock_),
        )
        transaction_manager.register(
            AssetAllocationService, lambda s: AssetAllocationService(s, clock_),
        )
        transaction_manager.register(
            TicketStatusService, lambda s: TicketStatusService(s, clock_),
        )

    @property
    def registry(self) -> HandlerRegistry:
        return self._registry

    @property
    def side_channel(self) -> SideChannel:
        return self._side_channel

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def initiate_approval(
        self,
        reference_type: ReferenceType | str,
        reference_id: int,
        requester_id: int,
        company_id: int,
        description: str = "",
        assigned_to_employee_id: int | None = None,
        manager_email: str | None = None,
    ) -> int:
        """
        Persist a PENDING approval request and notify its approver.

        No business validation of ``reference_id`` is performed.  The
        request is committed before approver resolution starts, so a
        missing manager or a failing sink never prevents its creation.

        Returns:
            The new request id.

        Raises:
            ValueError: If ``reference_type`` is not a known type.
        """
        ref_type = coerce_reference_type(reference_type)

        with LogContext.bind(
            actor_id=requester_id,
            company_id=company_id,
            reference_type=ref_type,
        ):
            with self._transactions.begin() as scope:
                request = scope.repository(ApprovalRequestStore).add_pending(
                    reference_type=ref_type,
                    reference_id=reference_id,
                    requester_id=requester_id,
                    company_id=company_id,
                    description=description,
                    assigned_to_employee_id=assigned_to_employee_id,
                )

            with LogContext.bind(request_id=request.id):
                self._notify_approver(request, manager_email)

        return request.id

    def approve_request(
        self,
        request_id: int,
        action_by_user_id: int,
        remarks: str | None = None,
    ) -> ApprovalRequest:
        """
        Approve a PENDING request and apply its side effect atomically.

        Raises:
            ApprovalRequestNotFoundError: Unknown request id.
            RequestNotPendingError: Request already resolved.
            ConcurrentTransitionError: Resolved concurrently.
            HandlerNotRegisteredError: No handler for the reference type.
            SideEffectFailure: Handler failed with a non-kernel error.
        """
        return self._decide(
            request_id, action_by_user_id, remarks, ApprovalStatus.APPROVED,
        )

    def reject_request(
        self,
        request_id: int,
        action_by_user_id: int,
        remarks: str | None = None,
    ) -> ApprovalRequest:
        """Reject a PENDING request and run its compensating action atomically."""
        return self._decide(
            request_id, action_by_user_id, remarks, ApprovalStatus.REJECTED,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_request(self, request_id: int) -> ApprovalRequest:
        with self._transactions.begin() as scope:
            return scope.repository(ApprovalRequestStore).get(request_id)

    def get_pending_approvals(self, company_id: int) -> list[ApprovalView]:
        with self._transactions.begin() as scope:
            return ApprovalSelector(scope.session).pending(company_id)

    def get_approval_history(self, company_id: int) -> list[ApprovalView]:
        with self._transactions.begin() as scope:
            return ApprovalSelector(scope.session).history(company_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _decide(
        self,
        request_id: int,
        action_by_user_id: int,
        remarks: str | None,
        new_status: ApprovalStatus,
    ) -> ApprovalRequest:
        with LogContext.bind(request_id=request_id, actor_id=action_by_user_id):
            scope = self._transactions.begin()
            try:
                store = scope.repository(ApprovalRequestStore)
                model = store.lock_pending(request_id)
                handler = self._registry.get(model.reference_type)
                resolved = store.mark_resolved(
                    model, new_status, action_by_user_id, remarks,
                )
                context = SideEffectContext(
                    request=resolved,
                    acting_user_id=action_by_user_id,
                    remarks=remarks,
                    scope=scope,
                )
                with LogContext.bind(
                    company_id=resolved.company_id,
                    reference_type=resolved.reference_type,
                ):
                    self._run_handler(handler, context, new_status)
                scope.commit()
            except Exception:
                if scope.is_active:
                    scope.rollback()
                raise
            finally:
                scope.close()

            event = (
                "approval_request_approved"
                if new_status is ApprovalStatus.APPROVED
                else "approval_request_rejected"
            )
            logger.info(
                event,
                extra={
                    "approval_request_id": resolved.id,
                    "reference_type": resolved.reference_type.value,
                    "reference_id": resolved.reference_id,
                    "action_by_user_id": action_by_user_id,
                },
            )

            self._notify_requester(resolved)
            return resolved

    def _run_handler(
        self,
        handler: ApprovalSideEffectHandler,
        context: SideEffectContext,
        new_status: ApprovalStatus,
    ) -> None:
        phase = "apply" if new_status is ApprovalStatus.APPROVED else "compensate"
        try:
            if phase == "apply":
                handler.apply(context)
            else:
                handler.compensate(context)
        except ApprovalKernelError as exc:
            self._log_side_effect_failure(context, phase, exc)
            raise
        except Exception as exc:
            self._log_side_effect_failure(context, phase, exc)
            raise SideEffectFailure(
                context.reference_type.value,
                context.reference_id,
                f"{type(exc).__name__}: {exc}",
            ) from exc

    @staticmethod
    def _log_side_effect_failure(
        context: SideEffectContext,
        phase: str,
        exc: Exception,
    ) -> None:
        logger.error(
            "approval_side_effect_failed",
            extra={
                "approval_request_id": context.request.id,
                "reference_type": context.reference_type.value,
                "reference_id": context.reference_id,
                "phase": phase,
                "error_type": type(exc).__name__,
            },
            exc_info=True,
        )

    def _notify_approver(
        self,
        request: ApprovalRequest,
        manager_email: str | None,
    ) -> None:
        try:
            with self._transactions.begin() as scope:
                directory = self._directory_factory(scope)
                contact = ManagerResolver(directory).resolve_approver(
                    request.requester_id, request.assigned_to_employee_id,
                )
                requester = directory.find_by_user_id(request.requester_id)

            requester_name = _requester_name(requester, request.requester_id)
            self._dispatch_approver_notifications(
                request, contact, requester_name, manager_email,
            )
        except Exception as exc:
            logger.warning(
                "notification_dispatch_failed",
                extra={
                    "channel": "approver",
                    "approval_request_id": request.id,
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
                exc_info=True,
            )

    def _dispatch_approver_notifications(
        self,
        request: ApprovalRequest,
        contact: ApproverContact | None,
        requester_name: str,
        manager_email: str | None,
    ) -> None:
        metadata = _request_metadata(request)

        if contact is not None and contact.user_id is not None:
            self._side_channel.notify_user(
                contact.user_id,
                "New Approval Request",
                f"{requester_name} requested approval: {request.description}",
                "approval_requested",
                metadata,
            )

        to_email = manager_email or (contact.email if contact is not None else None)
        if to_email:
            self._side_channel.email_approver(
                to_email, request.company_id, requester_name, request.description,
            )

    def _notify_requester(self, request: ApprovalRequest) -> None:
        if request.status is ApprovalStatus.APPROVED:
            title = "Request Approved"
            message = f'Your request "{request.description}" has been approved.'
            category = "approval_approved"
        else:
            title = "Request Rejected"
            message = f'Your request "{request.description}" has been rejected.'
            if request.remarks:
                message += f" Remarks: {request.remarks}"
            category = "approval_rejected"

        try:
            self._side_channel.notify_user(
                request.requester_id, title, message, category,
                _request_metadata(request),
            )
        except Exception as exc:
            logger.warning(
                "notification_dispatch_failed",
                extra={
                    "channel": "requester",
                    "approval_request_id": request.id,
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
                exc_info=True,
            )


def _requester_name(requester: EmployeeRecord | None, requester_id: int) -> str:
    if requester is not None and requester.display_name:
        return requester.display_name
    return f"User {requester_id}"


def _request_metadata(request: ApprovalRequest) -> dict[str, Any]:
    return {
        "approval_request_id": request.id,
        "reference_type": request.reference_type.value,
        "reference_id": request.reference_id,
        "status": request.status.value,
    }
