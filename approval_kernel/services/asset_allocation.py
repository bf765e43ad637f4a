"""
AssetAllocationService -- assignment and release of physical assets.

Responsibility:
    Moves an asset between AVAILABLE and IN_USE while keeping the
    assignment ledger (``asset_assignments``) consistent with the asset row.
    Implements the AssetAssigner collaborator contract (``assign`` /
    ``release``) used by the ASSET_ALLOCATION side-effect handler.

Architecture position:
    Kernel > Services -- imperative shell.  Runs inside the caller's
    TransactionScope; flushes, never commits.

Invariants enforced:
    - Single current assignment: at most one ``is_current`` row per asset.
      The asset row is read ``FOR UPDATE`` before the ledger is touched,
      the outgoing row is closed and flushed before the new one is
      inserted, and a partial unique index backs both.
    - Status consistency: IN_USE iff a current assignment exists.
    - Ledger rows are closed (``is_current=False``, ``return_date``), never
      deleted.

Failure modes:
    - AssetNotFoundError: unknown asset id, or an asset outside the
      requesting company.
    - AssetNotAvailableError: fresh assignment of an asset that is not
      AVAILABLE (MAINTENANCE, RETIRED, or IN_USE without an assignee).
    - OptimisticLockError: the asset row changed under us on a backend
      without row locks.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from approval_kernel.domain.assets import (
    AssetAssignmentRecord,
    AssetStatus,
    AssignmentOutcome,
    ReleaseOutcome,
)
from approval_kernel.domain.clock import Clock, SystemClock
from approval_kernel.exceptions import (
    AssetNotAvailableError,
    AssetNotFoundError,
    OptimisticLockError,
)
from approval_kernel.logging_config import get_logger
from approval_kernel.models.asset import Asset, AssetAssignment
from approval_kernel.services.base import BaseService

logger = get_logger("services.asset_allocation")


class AssetAllocationService(BaseService[Asset]):
    """
    Assign and release assets within the caller's transaction.

    Contract:
        ``assign_asset`` / ``release_asset`` return frozen outcome DTOs.
        ``assign`` / ``release`` are the AssetAssigner protocol aliases.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()

    # AssetAssigner protocol

    def assign(
        self,
        asset_id: int,
        employee_id: int,
        acting_user_id: int,
        remarks: str | None = None,
        *,
        company_id: int | None = None,
    ) -> AssignmentOutcome:
        return self.assign_asset(
            asset_id, employee_id, acting_user_id, remarks, company_id=company_id,
        )

    def release(
        self,
        asset_id: int,
        remarks: str | None = None,
        *,
        company_id: int | None = None,
    ) -> ReleaseOutcome:
        return self.release_asset(asset_id, remarks, company_id=company_id)

    # Operations

    def assign_asset(
        self,
        asset_id: int,
        employee_id: int,
        acting_user_id: int,
        remarks: str | None = None,
        *,
        company_id: int | None = None,
    ) -> AssignmentOutcome:
        """
        Assign ``asset_id`` to ``employee_id``.

        An IN_USE asset with an assignee is reassigned: the outgoing
        assignment row is closed and the outgoing employee is remembered
        as ``previous_user_employee_id``.

        When ``company_id`` is given the asset must belong to that tenant.

        Raises:
            AssetNotFoundError: If the asset does not exist, or belongs to
                another company than ``company_id``.
            AssetNotAvailableError: If this is not a reassignment and the
                asset is not AVAILABLE.
            OptimisticLockError: On a concurrent modification of the asset.
        """
        asset = self._lock_asset(asset_id, company_id)
        now = self._clock.now()

        is_reassignment = (
            asset.status == AssetStatus.IN_USE.value
            and asset.assigned_to_employee_id is not None
        )
        if not is_reassignment and asset.status != AssetStatus.AVAILABLE.value:
            raise AssetNotAvailableError(asset_id, asset.status)

        previous_employee_id: int | None = None
        if is_reassignment:
            previous_employee_id = asset.assigned_to_employee_id
            current = self._current_assignment(asset_id)
            if current is not None:
                current.is_current = False
                current.return_date = now
                note = f"Reassigned to employee {employee_id}"
                current.remarks = (
                    f"{current.remarks} | {note}" if current.remarks else note
                )
            asset.previous_user_employee_id = previous_employee_id
            # The closed row must hit the partial unique index before the
            # new current row is inserted.
            self._flush(asset_id)

        asset.status = AssetStatus.IN_USE.value
        asset.assigned_to_employee_id = employee_id
        asset.user_assigned_date = now

        assignment = AssetAssignment(
            asset_id=asset_id,
            employee_id=employee_id,
            assigned_by_id=acting_user_id,
            assigned_date=now,
            is_current=True,
            remarks=remarks,
            created_at=now,
        )
        self.session.add(assignment)
        self._flush(asset_id)

        logger.info(
            "asset_assigned",
            extra={
                "asset_id": asset_id,
                "employee_id": employee_id,
                "assignment_id": assignment.id,
                "is_reassignment": is_reassignment,
                "previous_employee_id": previous_employee_id,
            },
        )

        return AssignmentOutcome(
            asset_id=asset_id,
            employee_id=employee_id,
            assignment_id=assignment.id,
            is_reassignment=is_reassignment,
            previous_employee_id=previous_employee_id,
        )

    def release_asset(
        self,
        asset_id: int,
        remarks: str | None = None,
        *,
        company_id: int | None = None,
    ) -> ReleaseOutcome:
        """
        Return ``asset_id`` to AVAILABLE and close its current assignment.

        Releasing an asset with no assignee is allowed and simply ensures
        the AVAILABLE status (compensation of a rejected request must be
        safe to apply to an asset that was never tentatively assigned).
        """
        asset = self._lock_asset(asset_id, company_id)
        now = self._clock.now()

        previous_employee_id = asset.assigned_to_employee_id
        closed_assignment_id: int | None = None

        current = self._current_assignment(asset_id)
        if current is not None:
            current.is_current = False
            current.return_date = now
            current.return_remarks = remarks
            closed_assignment_id = current.id

        if previous_employee_id is not None:
            asset.previous_user_employee_id = previous_employee_id
        asset.status = AssetStatus.AVAILABLE.value
        asset.assigned_to_employee_id = None
        asset.user_assigned_date = None
        asset.last_return_date = now
        self._flush(asset_id)

        logger.info(
            "asset_released",
            extra={
                "asset_id": asset_id,
                "previous_employee_id": previous_employee_id,
                "closed_assignment_id": closed_assignment_id,
            },
        )

        return ReleaseOutcome(
            asset_id=asset_id,
            previous_employee_id=previous_employee_id,
            closed_assignment_id=closed_assignment_id,
        )

    # Reads

    def current_assignment(self, asset_id: int) -> AssetAssignmentRecord | None:
        row = self._current_assignment(asset_id)
        return row.to_dto() if row is not None else None

    # Internals

    def _lock_asset(self, asset_id: int, company_id: int | None = None) -> Asset:
        stmt = select(Asset).where(Asset.id == asset_id)
        if company_id is not None:
            # Another tenant's asset is reported as missing
            stmt = stmt.where(Asset.company_id == company_id)
        asset = self.session.execute(
            stmt.with_for_update().execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if asset is None:
            raise AssetNotFoundError(asset_id)
        return asset

    def _current_assignment(self, asset_id: int) -> AssetAssignment | None:
        return self.session.execute(
            select(AssetAssignment)
            .where(AssetAssignment.asset_id == asset_id)
            .where(AssetAssignment.is_current.is_(True))
        ).scalar_one_or_none()

    def _flush(self, asset_id: int) -> None:
        try:
            self.session.flush()
        except StaleDataError as exc:
            raise OptimisticLockError("Asset", asset_id) from exc
