"""
Notification side channel -- best-effort delivery after commit.

Responsibility:
    Fans approval events out to a NotificationSink (persistent in-app
    notifications) and an EmailSink, and guarantees that no failure on
    this path ever reaches the caller of the orchestrator.

Architecture position:
    Kernel > Services.  Called by the ApprovalOrchestrator strictly AFTER
    the authoritative transaction has committed.

Invariants enforced:
    - Isolation: SideChannel.dispatch catches every Exception raised by a
      sink (NotificationFailure or otherwise), logs
      ``notification_dispatch_failed`` and discards it.
    - Independence: PersistentNotificationSink writes in its OWN
      TransactionScope, never in the orchestrator's.
    - Background mode runs deliveries on a ThreadPoolExecutor; the caller's
      LogContext is copied into the worker so log lines stay correlated.

Failure modes:
    - Sinks raise NotificationFailure (wrapping SMTP/DB errors) -- always
      swallowed by SideChannel after logging.
"""

from __future__ import annotations

import contextvars
import smtplib
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from email.message import EmailMessage
from typing import Any, Callable

from sqlalchemy.exc import SQLAlchemyError

from approval_kernel.db.transaction import TransactionManager
from approval_kernel.domain.collaborators import (
    EmailSink,
    NotificationSink,
    NotificationType,
)
from approval_kernel.exceptions import NotificationFailure
from approval_kernel.logging_config import get_logger
from approval_kernel.models.notification import Notification

logger = get_logger("services.notifications")

# Category -> notification type for the in-app feed
_CATEGORY_TYPES: dict[str, NotificationType] = {
    "approval_requested": NotificationType.INFO,
    "approval_approved": NotificationType.SUCCESS,
    "approval_rejected": NotificationType.WARNING,
}


class PersistentNotificationSink:
    """Writes ``notifications`` rows, each in its own transaction scope."""

    def __init__(self, transaction_manager: TransactionManager):
        self._transactions = transaction_manager

    def notify(
        self,
        user_id: int,
        title: str,
        message: str,
        category: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        try:
            with self._transactions.begin() as scope:
                scope.session.add(
                    Notification(
                        user_id=user_id,
                        title=title,
                        message=message,
                        type=_CATEGORY_TYPES.get(category, NotificationType.INFO).value,
                        category=category,
                        payload=metadata,
                        is_read=False,
                    )
                )
        except SQLAlchemyError as exc:
            raise NotificationFailure("in_app", user_id, str(exc)) from exc


class SmtpEmailSink:
    """
    Sends the approval email over SMTP.

    Connection details come from ``approval_config.EmailConfig``; the sink
    opens one connection per message.
    """

    def __init__(
        self,
        host: str,
        port: int = 587,
        sender: str = "no-reply@localhost",
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    def build_message(
        self,
        to_email: str,
        company_id: int,
        requester_name: str,
        description: str,
    ) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to_email
        msg["Subject"] = f"[Approval Required] Request from {requester_name}"
        msg.set_content(
            f"{requester_name} has submitted a request that needs your approval.\n"
            f"\n"
            f"Company: {company_id}\n"
            f"Details: {description or 'N/A'}\n"
            f"\n"
            f"Please review it in the approvals console.\n"
        )
        return msg

    def send_approval_email(
        self,
        to_email: str,
        company_id: int,
        requester_name: str,
        description: str,
    ) -> None:
        msg = self.build_message(to_email, company_id, requester_name, description)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                if self.use_tls:
                    smtp.starttls()
                if self.username:
                    smtp.login(self.username, self.password or "")
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            raise NotificationFailure("email", to_email, str(exc)) from exc

        logger.info(
            "approval_email_sent",
            extra={"to_email": to_email, "company_id": company_id},
        )


class LoggingEmailSink:
    """Development EmailSink: records the email as a log line only."""

    def send_approval_email(
        self,
        to_email: str,
        company_id: int,
        requester_name: str,
        description: str,
    ) -> None:
        logger.info(
            "approval_email_logged",
            extra={
                "to_email": to_email,
                "company_id": company_id,
                "requester_name": requester_name,
                "description": description,
            },
        )


class SideChannel:
    """
    Best-effort dispatcher for post-commit notifications.

    Contract:
        ``dispatch`` never raises.  In background mode it returns the
        Future of the queued delivery; inline it returns None after the
        delivery has run (or failed and been logged).
    """

    def __init__(
        self,
        notification_sink: NotificationSink | None = None,
        email_sink: EmailSink | None = None,
        *,
        background: bool = False,
        max_workers: int = 2,
    ):
        self.notification_sink = notification_sink
        self.email_sink = email_sink
        self._executor: ThreadPoolExecutor | None = None
        if background:
            self._executor = ThreadPoolExecutor(
                max_workers=max_workers,
                thread_name_prefix="approval-notify",
            )
        self._pending: set[Future] = set()
        self._lock = threading.Lock()

    @property
    def is_background(self) -> bool:
        return self._executor is not None

    def notify_user(
        self,
        user_id: int,
        title: str,
        message: str,
        category: str,
        metadata: dict[str, Any] | None = None,
    ) -> Future | None:
        if self.notification_sink is None:
            return None
        return self.dispatch(
            "in_app",
            self.notification_sink.notify,
            user_id, title, message, category, metadata,
        )

    def email_approver(
        self,
        to_email: str,
        company_id: int,
        requester_name: str,
        description: str,
    ) -> Future | None:
        if self.email_sink is None:
            return None
        return self.dispatch(
            "email",
            self.email_sink.send_approval_email,
            to_email, company_id, requester_name, description,
        )

    def dispatch(
        self,
        channel: str,
        fn: Callable[..., Any],
        *args: Any,
    ) -> Future | None:
        if self._executor is None:
            self._deliver(channel, fn, args)
            return None

        ctx = contextvars.copy_context()
        try:
            future = self._executor.submit(ctx.run, self._deliver, channel, fn, args)
        except RuntimeError as exc:
            # Executor already shut down
            self._log_failure(channel, exc)
            return None
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)
        return future

    def drain(self, timeout: float | None = None) -> None:
        """Block until all queued deliveries have finished."""
        with self._lock:
            pending = list(self._pending)
        if pending:
            wait(pending, timeout=timeout)

    def shutdown(self, wait: bool = True) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=wait)

    def _deliver(self, channel: str, fn: Callable[..., Any], args: tuple) -> None:
        try:
            fn(*args)
        except Exception as exc:
            self._log_failure(channel, exc)

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    @staticmethod
    def _log_failure(channel: str, exc: BaseException) -> None:
        logger.warning(
            "notification_dispatch_failed",
            extra={
                "channel": channel,
                "error_type": type(exc).__name__,
                "error": str(exc),
            },
            exc_info=(type(exc), exc, exc.__traceback__),
        )
