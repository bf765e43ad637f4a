"""
Configuration loader (``approval_config.loader``).

Responsibility
--------------
Reads a YAML file with PyYAML ``safe_load`` and parses it into the frozen
dataclasses of ``approval_config.schema``.  Only ``get_active_config()``
calls this module at runtime.

Failure modes
-------------
* Missing file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing or invalid values  -> ``ValueError`` naming the offending key.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from approval_config.schema import (
    EMAIL_BACKENDS,
    LOG_LEVELS,
    DatabaseConfig,
    EmailConfig,
    NotificationConfig,
    WorkflowConfig,
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping, got {type(data).__name__}")
    return data


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"'{name}' must be a mapping, got {type(section).__name__}")
    return section


def _positive_int(section: str, key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"{section}.{key} must be a positive integer, got {value!r}")
    return value


def _non_negative_int(section: str, key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{section}.{key} must be a non-negative integer, got {value!r}")
    return value


def _bool(section: str, key: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{section}.{key} must be true or false, got {value!r}")
    return value


def parse_database(data: dict[str, Any], url_override: str | None = None) -> DatabaseConfig:
    """Parse the ``database`` section.  ``url_override`` wins over YAML."""
    url = url_override or data.get("url")
    if not url or not isinstance(url, str):
        raise ValueError("database.url is required (or set DATABASE_URL)")
    return DatabaseConfig(
        url=url,
        echo=_bool("database", "echo", data.get("echo", False)),
        pool_size=_positive_int("database", "pool_size", data.get("pool_size", 20)),
        max_overflow=_non_negative_int(
            "database", "max_overflow", data.get("max_overflow", 10),
        ),
        pool_timeout=_positive_int("database", "pool_timeout", data.get("pool_timeout", 30)),
        pool_recycle=_positive_int("database", "pool_recycle", data.get("pool_recycle", 1800)),
        create_schema=_bool("database", "create_schema", data.get("create_schema", False)),
    )


def parse_notifications(data: dict[str, Any]) -> NotificationConfig:
    """Parse the ``notifications`` section."""
    return NotificationConfig(
        enabled=_bool("notifications", "enabled", data.get("enabled", True)),
        in_app=_bool("notifications", "in_app", data.get("in_app", True)),
        background=_bool("notifications", "background", data.get("background", False)),
        max_workers=_positive_int(
            "notifications", "max_workers", data.get("max_workers", 2),
        ),
    )


def parse_email(data: dict[str, Any]) -> EmailConfig:
    """Parse the ``email`` section."""
    backend = str(data.get("backend", "log")).lower()
    if backend not in EMAIL_BACKENDS:
        raise ValueError(
            f"email.backend must be one of {', '.join(EMAIL_BACKENDS)}, got {backend!r}"
        )
    port = _positive_int("email", "port", data.get("port", 587))
    if port > 65535:
        raise ValueError(f"email.port must be <= 65535, got {port}")
    timeout = data.get("timeout", 10.0)
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ValueError(f"email.timeout must be a positive number, got {timeout!r}")
    host = data.get("host", "localhost")
    if backend == "smtp" and not host:
        raise ValueError("email.host is required when email.backend is smtp")
    return EmailConfig(
        backend=backend,
        host=host,
        port=port,
        sender=data.get("sender", "no-reply@localhost"),
        username=data.get("username"),
        password_env=data.get("password_env"),
        use_tls=_bool("email", "use_tls", data.get("use_tls", True)),
        timeout=float(timeout),
    )


def parse_workflow_config(
    data: dict[str, Any],
    *,
    url_override: str | None = None,
    source: str | None = None,
) -> WorkflowConfig:
    """Parse a whole configuration document."""
    log_level = str(data.get("log_level", "INFO")).upper()
    if log_level not in LOG_LEVELS:
        raise ValueError(
            f"log_level must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}"
        )
    return WorkflowConfig(
        database=parse_database(_section(data, "database"), url_override),
        notifications=parse_notifications(_section(data, "notifications")),
        email=parse_email(_section(data, "email")),
        log_level=log_level,
        source=source,
    )
