"""
Approval Kernel - workflow engine for the asset/helpdesk administration suite.

Turns business actions into durable approval requests with:
- A PENDING -> APPROVED | REJECTED state machine
- Type-specific side effects dispatched through a handler registry
- Explicit transaction scopes (commit or rollback exactly once)
- A best-effort notification side channel that never affects commits
"""

__version__ = "0.1.0"
