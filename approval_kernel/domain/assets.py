"""
Asset allocation value objects.

An asset's ``status`` must agree with its assignment ledger: IN_USE with
exactly one current assignment row, otherwise no current row at all.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class AssetStatus(str, Enum):
    """Lifecycle status of a physical asset."""

    AVAILABLE = "AVAILABLE"
    IN_USE = "IN_USE"
    MAINTENANCE = "MAINTENANCE"
    RETIRED = "RETIRED"


@dataclass(frozen=True)
class AssetAssignmentRecord:
    """One row of the assignment ledger."""

    id: int
    asset_id: int
    employee_id: int
    assigned_by_id: int | None
    assigned_date: datetime
    return_date: datetime | None
    is_current: bool
    remarks: str | None = None
    return_remarks: str | None = None


@dataclass(frozen=True)
class AssignmentOutcome:
    """Result of ``AssetAllocationService.assign_asset``."""

    asset_id: int
    employee_id: int
    assignment_id: int
    is_reassignment: bool
    previous_employee_id: int | None = None


@dataclass(frozen=True)
class ReleaseOutcome:
    """Result of ``AssetAllocationService.release_asset``."""

    asset_id: int
    previous_employee_id: int | None
    closed_assignment_id: int | None
