"""Pure domain types for the approval kernel. ZERO I/O."""

from approval_kernel.domain.approval import (
    APPROVAL_TRANSITIONS,
    TERMINAL_APPROVAL_STATUSES,
    ApprovalRequest,
    ApprovalStatus,
    ApprovalView,
    ApproverContact,
    ReferenceType,
    is_valid_transition,
)
from approval_kernel.domain.assets import (
    AssetAssignmentRecord,
    AssetStatus,
    AssignmentOutcome,
    ReleaseOutcome,
)
from approval_kernel.domain.clock import Clock, DeterministicClock, SystemClock

__all__ = [
    "APPROVAL_TRANSITIONS",
    "TERMINAL_APPROVAL_STATUSES",
    "ApprovalRequest",
    "ApprovalStatus",
    "ApprovalView",
    "ApproverContact",
    "AssetAssignmentRecord",
    "AssetStatus",
    "AssignmentOutcome",
    "Clock",
    "DeterministicClock",
    "ReferenceType",
    "ReleaseOutcome",
    "SystemClock",
    "is_valid_transition",
]
