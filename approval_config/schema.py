"""
Workflow configuration schema.

Frozen dataclasses parsed from YAML by ``approval_config.loader``.  The
runtime never sees raw dicts: ``get_active_config()`` returns a
``WorkflowConfig`` and ``build_orchestrator()`` consumes it.
"""

from __future__ import annotations

from dataclasses import dataclass, field

EMAIL_BACKENDS = ("none", "log", "smtp")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class DatabaseConfig:
    """Engine settings; ``url`` may be overridden by DATABASE_URL."""

    url: str
    echo: bool = False
    pool_size: int = 20
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 1800
    create_schema: bool = False


@dataclass(frozen=True)
class NotificationConfig:
    """Post-commit side channel settings."""

    enabled: bool = True
    in_app: bool = True
    background: bool = False
    max_workers: int = 2


@dataclass(frozen=True)
class EmailConfig:
    """Approval email delivery.

    ``password_env`` names the environment variable holding the SMTP
    password; the password itself never lives in YAML.
    """

    backend: str = "log"
    host: str = "localhost"
    port: int = 587
    sender: str = "no-reply@localhost"
    username: str | None = None
    password_env: str | None = None
    use_tls: bool = True
    timeout: float = 10.0


@dataclass(frozen=True)
class WorkflowConfig:
    """Complete engine configuration."""

    database: DatabaseConfig
    notifications: NotificationConfig = field(default_factory=NotificationConfig)
    email: EmailConfig = field(default_factory=EmailConfig)
    log_level: str = "INFO"
    source: str | None = None
