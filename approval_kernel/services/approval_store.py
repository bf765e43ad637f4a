"""
ApprovalRequestStore -- persistence and state transitions of approval requests.

Responsibility:
    Creates PENDING requests, loads them (optionally under a row lock) and
    applies the single allowed terminal transition.

Architecture position:
    Kernel > Services -- imperative shell.  Obtained from a TransactionScope
    by the ApprovalOrchestrator; never commits.

Invariants enforced:
    - Monotonic state: only PENDING -> APPROVED and PENDING -> REJECTED.
      A second transition raises RequestNotPendingError.
    - Check-then-act is serialized: ``lock_pending`` reads the row with
      ``SELECT ... FOR UPDATE``.  Where the backend ignores row locks the
      version_id_col check on flush turns a lost update into
      ConcurrentTransitionError.

Failure modes:
    - ApprovalRequestNotFoundError: no row with the given id.
    - RequestNotPendingError: request already APPROVED or REJECTED.
    - ConcurrentTransitionError: the row changed between load and flush.
    - ValueError: unknown reference type string.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from approval_kernel.domain.approval import (
    ApprovalRequest,
    ApprovalStatus,
    ReferenceType,
    is_valid_transition,
)
from approval_kernel.domain.clock import Clock, SystemClock
from approval_kernel.exceptions import (
    ApprovalRequestNotFoundError,
    ConcurrentTransitionError,
    RequestNotPendingError,
)
from approval_kernel.logging_config import get_logger
from approval_kernel.models.approval import ApprovalRequestModel
from approval_kernel.services.base import BaseService

logger = get_logger("services.approval_store")


def coerce_reference_type(value: ReferenceType | str) -> ReferenceType:
    """Accept the enum or its string value; raise ValueError otherwise."""
    if isinstance(value, ReferenceType):
        return value
    try:
        return ReferenceType(value)
    except ValueError:
        valid = ", ".join(rt.value for rt in ReferenceType)
        raise ValueError(
            f"Unknown reference type {value!r}; expected one of: {valid}"
        ) from None


class ApprovalRequestStore(BaseService[ApprovalRequestModel]):
    """
    Write-side repository for ApprovalRequestModel.

    Contract:
        Public readers return frozen ``ApprovalRequest`` DTOs.
        ``lock_pending`` returns the ORM row so the caller can resolve it
        in the same transaction via ``mark_resolved``.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()

    def add_pending(
        self,
        reference_type: ReferenceType | str,
        reference_id: int,
        requester_id: int,
        company_id: int,
        description: str = "",
        assigned_to_employee_id: int | None = None,
    ) -> ApprovalRequest:
        """Persist a new PENDING request and return its snapshot."""
        ref_type = coerce_reference_type(reference_type)
        model = ApprovalRequestModel(
            reference_type=ref_type.value,
            reference_id=reference_id,
            status=ApprovalStatus.PENDING.value,
            requester_id=requester_id,
            company_id=company_id,
            description=description or "",
            assigned_to_employee_id=assigned_to_employee_id,
            created_at=self._clock.now(),
        )
        self.session.add(model)
        self.session.flush()

        logger.info(
            "approval_request_created",
            extra={
                "approval_request_id": model.id,
                "reference_type": ref_type.value,
                "reference_id": reference_id,
                "requester_id": requester_id,
                "company_id": company_id,
            },
        )
        return model.to_dto()

    def get(self, request_id: int) -> ApprovalRequest:
        return self._load(request_id, for_update=False).to_dto()

    def find(self, request_id: int) -> ApprovalRequest | None:
        model = self.session.get(ApprovalRequestModel, request_id)
        return model.to_dto() if model is not None else None

    def lock_pending(self, request_id: int) -> ApprovalRequestModel:
        """
        Load the request under ``FOR UPDATE`` and verify it is PENDING.

        Raises:
            ApprovalRequestNotFoundError: If absent.
            RequestNotPendingError: If already resolved.
        """
        model = self._load(request_id, for_update=True)
        if model.status != ApprovalStatus.PENDING.value:
            raise RequestNotPendingError(request_id, model.status)
        return model

    def mark_resolved(
        self,
        model: ApprovalRequestModel,
        new_status: ApprovalStatus,
        action_by_user_id: int,
        remarks: str | None = None,
    ) -> ApprovalRequest:
        """
        Apply the terminal transition and flush with the version check.

        Raises:
            RequestNotPendingError: If ``new_status`` is not reachable.
            ConcurrentTransitionError: If another transaction already
                resolved the row.
        """
        # A failed flush expires the row; keep the id for the error path
        request_id = model.id
        current = ApprovalStatus(model.status)
        if not is_valid_transition(current, new_status):
            raise RequestNotPendingError(request_id, model.status)

        model.status = new_status.value
        model.action_by_user_id = action_by_user_id
        model.action_at = self._clock.now()
        model.remarks = remarks
        try:
            self.session.flush()
        except StaleDataError as exc:
            logger.warning(
                "approval_request_concurrent_transition",
                extra={
                    "approval_request_id": request_id,
                    "attempted_status": new_status.value,
                },
            )
            raise ConcurrentTransitionError(request_id) from exc
        return model.to_dto()

    def transition(
        self,
        request_id: int,
        new_status: ApprovalStatus,
        action_by_user_id: int,
        remarks: str | None = None,
    ) -> ApprovalRequest:
        """Lock, verify PENDING and resolve in one call."""
        model = self.lock_pending(request_id)
        return self.mark_resolved(model, new_status, action_by_user_id, remarks)

    def _load(self, request_id: int, for_update: bool) -> ApprovalRequestModel:
        stmt = select(ApprovalRequestModel).where(
            ApprovalRequestModel.id == request_id
        )
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        model = self.session.execute(stmt).scalar_one_or_none()
        if model is None:
            raise ApprovalRequestNotFoundError(request_id)
        return model
