"""Tests for approval domain types: state machine, DTOs, clock."""

from datetime import datetime, timedelta, timezone

import pytest

from approval_kernel.domain.approval import (
    APPROVAL_TRANSITIONS,
    TERMINAL_APPROVAL_STATUSES,
    ApprovalRequest,
    ApprovalStatus,
    ReferenceType,
    is_valid_transition,
)
from approval_kernel.domain.clock import DeterministicClock
from approval_kernel.domain.collaborators import EmployeeRecord
from approval_kernel.services.approval_store import coerce_reference_type


class TestTransitions:

    @pytest.mark.parametrize("target", [ApprovalStatus.APPROVED, ApprovalStatus.REJECTED])
    def test_pending_can_be_resolved(self, target):
        assert is_valid_transition(ApprovalStatus.PENDING, target)

    @pytest.mark.parametrize("terminal", sorted(TERMINAL_APPROVAL_STATUSES))
    @pytest.mark.parametrize("target", list(ApprovalStatus))
    def test_terminal_states_have_no_exits(self, terminal, target):
        assert not is_valid_transition(terminal, target)
        assert APPROVAL_TRANSITIONS[terminal] == frozenset()

    def test_pending_to_pending_is_not_a_transition(self):
        assert not is_valid_transition(ApprovalStatus.PENDING, ApprovalStatus.PENDING)


class TestApprovalRequestDTO:

    def _request(self, status):
        return ApprovalRequest(
            id=1,
            reference_type=ReferenceType.TICKET,
            reference_id=9,
            status=status,
            requester_id=5,
            company_id=100,
            description="x",
        )

    def test_pending_flags(self):
        request = self._request(ApprovalStatus.PENDING)
        assert request.is_pending
        assert not request.is_terminal

    def test_terminal_flags(self):
        request = self._request(ApprovalStatus.REJECTED)
        assert not request.is_pending
        assert request.is_terminal

    def test_is_frozen(self):
        request = self._request(ApprovalStatus.PENDING)
        with pytest.raises(AttributeError):
            request.status = ApprovalStatus.APPROVED


class TestReferenceTypeCoercion:

    def test_accepts_enum(self):
        assert coerce_reference_type(ReferenceType.PURCHASE_ORDER) is ReferenceType.PURCHASE_ORDER

    def test_accepts_string_value(self):
        assert coerce_reference_type("ASSET_ALLOCATION") is ReferenceType.ASSET_ALLOCATION

    def test_rejects_unknown_string(self):
        with pytest.raises(ValueError, match="Unknown reference type 'CAR_LEASE'"):
            coerce_reference_type("CAR_LEASE")


class TestEmployeeRecord:

    def test_display_name_strips_missing_last_name(self):
        record = EmployeeRecord(id=1, company_id=1, first_name="Cher", last_name="")
        assert record.display_name == "Cher"


class TestDeterministicClock:

    def test_now_is_stable_until_advanced(self):
        clock = DeterministicClock()
        assert clock.now() == clock.now()
        before = clock.now()
        clock.advance(30)
        assert clock.now() - before == timedelta(seconds=30)

    def test_set_time_resets_advance(self):
        clock = DeterministicClock()
        clock.advance(5)
        pinned = datetime(2025, 6, 1, tzinfo=timezone.utc)
        clock.set_time(pinned)
        assert clock.now() == pinned
        assert clock.tick() == pinned + timedelta(seconds=1)
