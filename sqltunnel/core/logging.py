"""Structured logging with secret redaction for sqltunnel.

Logs go to stderr as one JSON object per line. Auth tokens are registered
for redaction when a configuration carrying one is built, so a token that
ends up in a message or a structured field is replaced by ``[REDACTED]``.
"""

import json
import logging
import os
import sys
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Set


_SECRET_REGISTRY: Set[str] = set()
_SECRET_REGISTRY_LOCK = threading.Lock()


class SecretRedactionFilter(logging.Filter):
    """Logging filter that redacts registered secrets."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = redact_secrets(record.msg)

        if record.args and isinstance(record.args, tuple):
            record.args = tuple(
                redact_secrets(arg) if isinstance(arg, str) else arg
                for arg in record.args
            )

        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            record.extra_fields = {
                key: redact_secrets(value) if isinstance(value, str) else value
                for key, value in extra_fields.items()
            }

        return True


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if hasattr(record, "extra_fields"):
            log_entry.update(record.extra_fields)

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


def init_logging(level: Optional[str] = None) -> None:
    """Initialize stderr logging with JSON format and secret redaction.

    Call this once from the process entry point (the CLI does) before any
    connection or server is created.

    Args:
        level: Log level name. Falls back to ``SQLTUNNEL_LOG_LEVEL``, then INFO.
    """
    log_level = (level or os.getenv("SQLTUNNEL_LOG_LEVEL", "INFO")).upper()

    numeric_level = getattr(logging, log_level, None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(numeric_level)
    stderr_handler.addFilter(SecretRedactionFilter())
    stderr_handler.setFormatter(JSONFormatter())
    root_logger.addHandler(stderr_handler)

    logging.getLogger(__name__).debug("logging initialized", extra={
        "extra_fields": {"log_level": log_level, "handler": "stderr", "format": "json"}
    })


def register_secret_for_redaction(secret_value: Optional[str]) -> None:
    """Register a secret value for redaction in logs.

    Args:
        secret_value: The secret string to redact. Blank values are ignored.
    """
    if not secret_value or not secret_value.strip():
        return

    with _SECRET_REGISTRY_LOCK:
        _SECRET_REGISTRY.add(secret_value.strip())


def redact_secrets(text: str) -> str:
    """Replace every registered secret in ``text`` with ``[REDACTED]``."""
    if not text:
        return text

    result = text
    with _SECRET_REGISTRY_LOCK:
        for secret in _SECRET_REGISTRY:
            if secret in result:
                result = result.replace(secret, "[REDACTED]")

    return result


def safe_log(level: str, message: str, logger: Optional[logging.Logger] = None, **kwargs: Any) -> None:
    """Log a message with structured fields and secret redaction.

    Args:
        level: Log level (debug, info, warning, error, critical)
        message: Log message
        logger: Logger to use; defaults to this module's logger
        **kwargs: Additional fields to include in the log entry
    """
    logger = logger or logging.getLogger(__name__)

    safe_message = redact_secrets(message)
    safe_kwargs = {
        key: redact_secrets(value) if isinstance(value, str) else value
        for key, value in kwargs.items()
    }

    log_method = getattr(logger, level.lower(), logger.info)
    if safe_kwargs:
        log_method(safe_message, extra={"extra_fields": safe_kwargs})
    else:
        log_method(safe_message)


def clear_secret_registry() -> None:
    """Clear all registered secrets (mainly for testing)."""
    with _SECRET_REGISTRY_LOCK:
        _SECRET_REGISTRY.clear()


def get_registered_secrets_count() -> int:
    with _SECRET_REGISTRY_LOCK:
        return len(_SECRET_REGISTRY)
