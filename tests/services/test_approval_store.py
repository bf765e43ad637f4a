"""
Tests for ApprovalRequestStore.

Covers:
- add_pending(): defaults, string reference types, unknown type
- lock_pending() / mark_resolved(): stamping, monotonicity, not found
"""

import pytest

from approval_kernel.domain.approval import ApprovalStatus, ReferenceType
from approval_kernel.exceptions import (
    ApprovalRequestNotFoundError,
    InvalidStateError,
    NotFoundError,
    RequestNotPendingError,
)
from approval_kernel.services.approval_store import ApprovalRequestStore

from tests.conftest import ADMIN_USER_ID, COMPANY_ID, REQUESTER_USER_ID


@pytest.fixture
def store_scope(transaction_manager, deterministic_clock):
    """Run ``fn(store)`` in its own committed scope."""

    def _run(fn):
        with transaction_manager.begin() as scope:
            return fn(ApprovalRequestStore(scope.session, deterministic_clock))

    return _run


def _add(store, reference_type=ReferenceType.TICKET, reference_id=1, company_id=COMPANY_ID):
    return store.add_pending(
        reference_type, reference_id, REQUESTER_USER_ID, company_id, "store test",
    )


class TestAddPending:

    def test_creates_pending_request(self, store_scope, deterministic_clock):
        request = store_scope(_add)

        assert request.status is ApprovalStatus.PENDING
        assert request.reference_type is ReferenceType.TICKET
        assert request.action_by_user_id is None
        assert request.action_at is None
        assert request.remarks is None
        assert request.created_at == deterministic_clock.now()

    def test_accepts_string_reference_type(self, store_scope):
        request = store_scope(lambda s: _add(s, reference_type="PURCHASE_ORDER"))
        assert request.reference_type is ReferenceType.PURCHASE_ORDER

    def test_rejects_unknown_reference_type(self, store_scope):
        with pytest.raises(ValueError):
            store_scope(lambda s: _add(s, reference_type="SPACESHIP"))

    def test_logs_creation(self, store_scope, captured_logs):
        request = store_scope(_add)
        created = [r for r in captured_logs() if r["message"] == "approval_request_created"]
        assert created[-1]["approval_request_id"] == request.id


class TestTransitions:

    def test_transition_stamps_action_fields(self, store_scope, deterministic_clock):
        request = store_scope(_add)
        deterministic_clock.advance(60)

        resolved = store_scope(lambda s: s.transition(
            request.id, ApprovalStatus.APPROVED, ADMIN_USER_ID, "looks fine",
        ))

        assert resolved.status is ApprovalStatus.APPROVED
        assert resolved.action_by_user_id == ADMIN_USER_ID
        assert resolved.action_at == deterministic_clock.now()
        assert resolved.remarks == "looks fine"

    @pytest.mark.parametrize("first", [ApprovalStatus.APPROVED, ApprovalStatus.REJECTED])
    @pytest.mark.parametrize("second", [ApprovalStatus.APPROVED, ApprovalStatus.REJECTED])
    def test_terminal_state_cannot_be_reentered(self, store_scope, first, second):
        request = store_scope(_add)
        store_scope(lambda s: s.transition(request.id, first, ADMIN_USER_ID))

        with pytest.raises(RequestNotPendingError) as exc_info:
            store_scope(lambda s: s.transition(request.id, second, 99, "again"))

        assert isinstance(exc_info.value, InvalidStateError)
        assert exc_info.value.current_status == first.value
        after = store_scope(lambda s: s.get(request.id))
        assert after.status is first
        assert after.action_by_user_id == ADMIN_USER_ID

    def test_mark_resolved_rejects_pending_target(self, store_scope):
        request = store_scope(_add)

        def _resolve_to_pending(store):
            model = store.lock_pending(request.id)
            return store.mark_resolved(model, ApprovalStatus.PENDING, ADMIN_USER_ID)

        with pytest.raises(RequestNotPendingError):
            store_scope(_resolve_to_pending)

    def test_unknown_request(self, store_scope):
        with pytest.raises(ApprovalRequestNotFoundError) as exc_info:
            store_scope(lambda s: s.lock_pending(424242))
        assert isinstance(exc_info.value, NotFoundError)
        assert exc_info.value.code == "APPROVAL_REQUEST_NOT_FOUND"

    def test_find_returns_none_for_unknown(self, store_scope):
        assert store_scope(lambda s: s.find(424242)) is None
