"""
Typed Exception Hierarchy for the Approval Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

The orchestrator's three state-changing operations (initiate, approve,
reject) are called by HTTP/RPC layers that map failures to status codes.
Those layers must catch by TYPE, never by parsing message strings:

    try:
        orchestrator.approve_request(request_id, actor_id)
    except NotFoundError as e:
        return response(404, code=e.code)
    except InvalidStateError as e:
        return response(409, code=e.code)
    except SideEffectFailure as e:
        return response(502, code=e.code, reference=e.reference_id)

Every exception has:
  1. A TYPED class (catch by type, not message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. Structured attributes (not just a message string)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    ApprovalKernelError (base)
    |
    +-- NotFoundError
    |   +-- ApprovalRequestNotFoundError
    |   +-- AssetNotFoundError
    |   +-- EmployeeNotFoundError
    |   +-- TicketNotFoundError
    |   +-- PurchaseOrderNotFoundError
    |
    +-- InvalidStateError
    |   +-- RequestNotPendingError
    |   +-- ConcurrentTransitionError
    |   +-- AssetNotAvailableError
    |
    +-- SideEffectFailure
    +-- NotificationFailure
    +-- HandlerNotRegisteredError
    +-- TransactionScopeError
    +-- ImmutabilityViolationError
    |
    +-- ConcurrencyError
        +-- OptimisticLockError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                          | When Raised
----------------|-------------------------------|---------------------------------------
Not found       | APPROVAL_REQUEST_NOT_FOUND    | Request ID doesn't exist
                | ASSET_NOT_FOUND               | Asset ID doesn't exist
                | EMPLOYEE_NOT_FOUND            | Employee ID doesn't exist
                | TICKET_NOT_FOUND              | Ticket ID doesn't exist
                | PURCHASE_ORDER_NOT_FOUND      | PO ID doesn't exist
----------------|-------------------------------|---------------------------------------
Invalid state   | REQUEST_NOT_PENDING           | Approve/reject of a terminal request
                | CONCURRENT_TRANSITION         | Request resolved by another transaction
                | ASSET_NOT_AVAILABLE           | Fresh assignment of a non-AVAILABLE asset
----------------|-------------------------------|---------------------------------------
Dispatch        | SIDE_EFFECT_FAILED            | Handler raised a non-kernel error
                | HANDLER_NOT_REGISTERED        | No handler for a reference type
----------------|-------------------------------|---------------------------------------
Side channel    | NOTIFICATION_FAILED           | Email/notification sink failed
----------------|-------------------------------|---------------------------------------
Infrastructure  | TRANSACTION_SCOPE_MISUSE      | Commit/rollback twice, or neither
                | OPTIMISTIC_LOCK_CONFLICT      | Row modified by another transaction
                | IMMUTABILITY_VIOLATION        | Deleting an audit-trail row

===============================================================================
PROPAGATION POLICY
===============================================================================

- NotFoundError / InvalidStateError / SideEffectFailure propagate verbatim
  out of the orchestrator.  None of them is retried automatically.
- NotificationFailure is ALWAYS caught by the side channel, logged and
  discarded.  It never reaches the caller and never causes a rollback.
- HandlerNotRegisteredError and TransactionScopeError indicate programming
  errors and must fail loudly.
"""


class ApprovalKernelError(Exception):
    """
    Base exception for all approval kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "APPROVAL_KERNEL_ERROR"


# Not-found exceptions


class NotFoundError(ApprovalKernelError):
    """Base exception for entities referenced by id that do not exist."""

    code: str = "NOT_FOUND"

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} not found: {entity_id}")


class ApprovalRequestNotFoundError(NotFoundError):
    """Approval request with given ID was not found."""

    code: str = "APPROVAL_REQUEST_NOT_FOUND"

    def __init__(self, request_id: int):
        self.request_id = request_id
        super().__init__("ApprovalRequest", request_id)


class AssetNotFoundError(NotFoundError):
    """Asset with given ID was not found."""

    code: str = "ASSET_NOT_FOUND"

    def __init__(self, asset_id: int):
        self.asset_id = asset_id
        super().__init__("Asset", asset_id)


class EmployeeNotFoundError(NotFoundError):
    """Employee with given ID was not found."""

    code: str = "EMPLOYEE_NOT_FOUND"

    def __init__(self, employee_id: int):
        self.employee_id = employee_id
        super().__init__("Employee", employee_id)


class TicketNotFoundError(NotFoundError):
    """Ticket with given ID was not found."""

    code: str = "TICKET_NOT_FOUND"

    def __init__(self, ticket_id: int):
        self.ticket_id = ticket_id
        super().__init__("Ticket", ticket_id)


class PurchaseOrderNotFoundError(NotFoundError):
    """Purchase order with given ID was not found."""

    code: str = "PURCHASE_ORDER_NOT_FOUND"

    def __init__(self, purchase_order_id: int):
        self.purchase_order_id = purchase_order_id
        super().__init__("PurchaseOrder", purchase_order_id)


# Invalid-state exceptions


class InvalidStateError(ApprovalKernelError):
    """Base exception for operations not allowed in the entity's current state."""

    code: str = "INVALID_STATE"


class RequestNotPendingError(InvalidStateError):
    """
    Approve/reject attempted on a request that already left PENDING.

    Terminal states are final: a second approve is an error, not a no-op.
    """

    code: str = "REQUEST_NOT_PENDING"

    def __init__(self, request_id: int, current_status: str):
        self.request_id = request_id
        self.current_status = current_status
        super().__init__(
            f"Approval request {request_id} is not pending "
            f"(status: {current_status})"
        )


class ConcurrentTransitionError(InvalidStateError):
    """
    The request was resolved by another transaction between load and write.

    Raised when the optimistic version check fails on backends that do not
    honour SELECT ... FOR UPDATE.
    """

    code: str = "CONCURRENT_TRANSITION"

    def __init__(self, request_id: int):
        self.request_id = request_id
        super().__init__(
            f"Approval request {request_id} was resolved by a concurrent transaction"
        )


class AssetNotAvailableError(InvalidStateError):
    """Fresh (non-reassignment) assignment of an asset that is not AVAILABLE."""

    code: str = "ASSET_NOT_AVAILABLE"

    def __init__(self, asset_id: int, current_status: str):
        self.asset_id = asset_id
        self.current_status = current_status
        super().__init__(
            f"Asset {asset_id} is not available for assignment "
            f"(status: {current_status})"
        )


# Dispatch exceptions


class SideEffectFailure(ApprovalKernelError):
    """
    A side-effect handler failed during approve/reject dispatch.

    The whole transaction (status write + side effect) is rolled back and
    the request remains PENDING so the action can be retried.  The
    original exception is chained as ``__cause__``.
    """

    code: str = "SIDE_EFFECT_FAILED"

    def __init__(self, reference_type: str, reference_id: int, reason: str):
        self.reference_type = reference_type
        self.reference_id = reference_id
        self.reason = reason
        super().__init__(
            f"Side effect for {reference_type} {reference_id} failed: {reason}"
        )


class HandlerNotRegisteredError(ApprovalKernelError):
    """
    No side-effect handler registered for a reference type.

    This is a configuration/programming error, never a user-facing failure.
    """

    code: str = "HANDLER_NOT_REGISTERED"

    def __init__(self, reference_type: str):
        self.reference_type = reference_type
        super().__init__(f"No side-effect handler registered for {reference_type}")


# Side-channel exceptions


class NotificationFailure(ApprovalKernelError):
    """Email or persistent-notification dispatch failed."""

    code: str = "NOTIFICATION_FAILED"

    def __init__(self, channel: str, recipient: str | int | None, reason: str):
        self.channel = channel
        self.recipient = recipient
        self.reason = reason
        super().__init__(f"{channel} notification to {recipient} failed: {reason}")


# Infrastructure exceptions


class TransactionScopeError(ApprovalKernelError):
    """Transaction scope used incorrectly (finalized twice, or never)."""

    code: str = "TRANSACTION_SCOPE_MISUSE"

    def __init__(self, scope_id: str, state: str, reason: str):
        self.scope_id = scope_id
        self.state = state
        self.reason = reason
        super().__init__(f"Transaction scope {scope_id} ({state}): {reason}")


class ImmutabilityViolationError(ApprovalKernelError):
    """
    Attempted to delete an audit-trail record.

    Approval requests and asset assignment rows are resolved or closed,
    never physically deleted.
    """

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: int | str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )


class ConcurrencyError(ApprovalKernelError):
    """Base exception for concurrency-related errors."""

    code: str = "CONCURRENCY_ERROR"


class OptimisticLockError(ConcurrencyError):
    """Optimistic locking conflict detected."""

    code: str = "OPTIMISTIC_LOCK_CONFLICT"

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(
            f"Optimistic lock conflict on {entity_type} {entity_id}: "
            "entity was modified by another transaction"
        )
