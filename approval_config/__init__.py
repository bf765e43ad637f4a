"""
approval_config -- single public entrypoint for workflow configuration.

Responsibility:
    ``get_active_config()`` is the ONLY way the runtime obtains
    configuration; ``build_orchestrator()`` turns a ``WorkflowConfig`` into
    a wired ApprovalOrchestrator (engine, transaction manager, handler
    registry, side channel and sinks).

Architecture position:
    Configuration sits above ``approval_kernel``.  The kernel MUST NEVER
    import from ``approval_config``.

Failure modes:
    - ``FileNotFoundError`` -- explicit config path does not exist.
    - ``ValueError`` -- missing or invalid configuration values.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from approval_config.loader import load_yaml_file, parse_workflow_config
from approval_config.schema import (
    DatabaseConfig,
    EmailConfig,
    NotificationConfig,
    WorkflowConfig,
)
from approval_kernel.db.engine import (
    create_tables,
    get_session_factory,
    init_engine_from_url,
)
from approval_kernel.db.transaction import TransactionManager
from approval_kernel.domain.clock import Clock
from approval_kernel.handlers.registry import HandlerRegistry, default_registry
from approval_kernel.logging_config import configure_logging, get_logger
from approval_kernel.services.approval_orchestrator import ApprovalOrchestrator
from approval_kernel.services.notifications import (
    LoggingEmailSink,
    PersistentNotificationSink,
    SideChannel,
    SmtpEmailSink,
)

logger = get_logger("config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "DatabaseConfig",
    "EmailConfig",
    "NotificationConfig",
    "WorkflowConfig",
    "build_email_sink",
    "build_orchestrator",
    "build_side_channel",
    "get_active_config",
]


def get_active_config(path: Path | str | None = None) -> WorkflowConfig:
    """
    Load the workflow configuration.

    Args:
        path: YAML file to load; the packaged ``defaults.yaml`` when None.

    Returns:
        Frozen ``WorkflowConfig``.  ``DATABASE_URL`` in the environment, when
        set and non-empty, replaces ``database.url``.
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    data = load_yaml_file(config_path)
    config = parse_workflow_config(
        data,
        url_override=os.environ.get("DATABASE_URL") or None,
        source=str(config_path),
    )
    logger.info(
        "workflow_config_loaded",
        extra={
            "source": config.source,
            "email_backend": config.email.backend,
            "notifications_enabled": config.notifications.enabled,
            "notifications_background": config.notifications.background,
        },
    )
    return config


def build_email_sink(config: EmailConfig):
    """EmailSink for ``config.backend``; None when email is disabled."""
    if config.backend == "none":
        return None
    if config.backend == "log":
        return LoggingEmailSink()
    password = os.environ.get(config.password_env) if config.password_env else None
    return SmtpEmailSink(
        host=config.host,
        port=config.port,
        sender=config.sender,
        username=config.username,
        password=password,
        use_tls=config.use_tls,
        timeout=config.timeout,
    )


def build_side_channel(
    config: WorkflowConfig,
    transaction_manager: TransactionManager,
) -> SideChannel:
    notifications = config.notifications
    if not notifications.enabled:
        return SideChannel()
    return SideChannel(
        notification_sink=(
            PersistentNotificationSink(transaction_manager)
            if notifications.in_app
            else None
        ),
        email_sink=build_email_sink(config.email),
        background=notifications.background,
        max_workers=notifications.max_workers,
    )


def build_orchestrator(
    config: WorkflowConfig | None = None,
    *,
    registry: HandlerRegistry | None = None,
    clock: Clock | None = None,
) -> ApprovalOrchestrator:
    """Wire an ApprovalOrchestrator from configuration."""
    config = config or get_active_config()

    configure_logging(level=getattr(logging, config.log_level))
    db = config.database
    init_engine_from_url(
        db.url,
        echo=db.echo,
        pool_size=db.pool_size,
        max_overflow=db.max_overflow,
        pool_timeout=db.pool_timeout,
        pool_recycle=db.pool_recycle,
    )
    if db.create_schema:
        create_tables()

    transaction_manager = TransactionManager(get_session_factory())
    return ApprovalOrchestrator(
        transaction_manager,
        registry=registry if registry is not None else default_registry(),
        side_channel=build_side_channel(config, transaction_manager),
        clock=clock,
    )
