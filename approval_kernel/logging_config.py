"""
Structured JSON logging for the approval kernel.

Every record is one JSON object per line.  Three sources are merged into it:

1. The fixed fields: ``ts``, ``level``, ``logger``, ``message``.
2. The bound workflow context (see ``LogContext``): ``request_id``,
   ``actor_id``, ``company_id``, ``reference_type``, ``correlation_id``.
3. Whatever the call site passed as ``extra=``.

Messages are snake_case event keys (``approval_request_approved``), never
prose, so log pipelines can filter on them.  Exceptions attached to a record
contribute ``exc_type``, ``exc_message``, ``exc_code`` and every public
attribute of an ApprovalKernelError as ``exc_<attr>``.

Usage::

    logger = get_logger("services.approval_store")

    with LogContext.bind(request_id=42, actor_id=7):
        logger.info("approval_request_approved", extra={"reference_id": 10})
"""

import json
import logging
import sys
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Iterator

__all__ = [
    "LogContext",
    "StructuredFormatter",
    "configure_logging",
    "get_logger",
    "reset_logging",
]

_LOGGER_PREFIX = "approval_kernel"

_CONTEXT_FIELDS = (
    "correlation_id",
    "request_id",
    "actor_id",
    "company_id",
    "reference_type",
)

_context_vars: dict[str, ContextVar[str | None]] = {
    name: ContextVar(f"approval_log_{name}", default=None)
    for name in _CONTEXT_FIELDS
}


def _context_value(value: Any) -> str:
    if isinstance(value, Enum):
        value = value.value
    return str(value)


class LogContext:
    """
    Workflow fields attached to every log line emitted in the current context.

    Backed by contextvars, so values follow the thread or task that bound
    them and are copied into notification workers by ``copy_context()``.
    """

    FIELDS = _CONTEXT_FIELDS

    @staticmethod
    def get_all() -> dict[str, str]:
        return {
            name: value
            for name, var in _context_vars.items()
            if (value := var.get()) is not None
        }

    @staticmethod
    def clear() -> None:
        for var in _context_vars.values():
            var.set(None)

    @staticmethod
    @contextmanager
    def bind(**fields: Any) -> Iterator[None]:
        """
        Bind fields for the duration of the ``with`` block.

        Ids and enums are stringified.  None values and unknown field names
        are ignored; previous values are restored on exit.
        """
        tokens = [
            (_context_vars[name], _context_vars[name].set(_context_value(value)))
            for name, value in fields.items()
            if value is not None and name in _context_vars
        ]
        try:
            yield
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


# Attributes every LogRecord carries; anything else came from ``extra=``
_RECORD_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


def _to_json(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    # Decimal, UUID and anything else without a JSON form
    return str(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    for attr, value in vars(exc).items():
        if not attr.startswith("_"):
            fields[f"exc_{attr}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRIBUTES:
                payload.setdefault(key, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_to_json)


def get_logger(name: str) -> logging.Logger:
    """Logger ``approval_kernel.<name>``."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_configured = False
_configure_lock = threading.Lock()


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Install the JSON handler on the ``approval_kernel`` logger.

    Only the first call has an effect; the kernel calls this from
    ``init_engine_from_url`` and the config layer calls it with the
    configured level before that.
    """
    global _configured
    with _configure_lock:
        if _configured:
            return
        _configured = True

    kernel_logger = logging.getLogger(_LOGGER_PREFIX)
    kernel_logger.setLevel(level)
    kernel_logger.propagate = False

    if handler is None:
        handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())
    kernel_logger.addHandler(handler)


def reset_logging() -> None:
    """Remove the kernel handlers so the next configure_logging() applies (tests)."""
    global _configured
    with _configure_lock:
        _configured = False
    kernel_logger = logging.getLogger(_LOGGER_PREFIX)
    kernel_logger.handlers.clear()
    kernel_logger.setLevel(logging.WARNING)
