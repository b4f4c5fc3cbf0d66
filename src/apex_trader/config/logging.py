"""Structured logging configuration using structlog."""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any, Optional

import structlog
from structlog.types import Processor


def setup_logging(
    level: str = "INFO",
    format_type: str = "structured",
    file_enabled: bool = True,
    file_path: str = "data/apex_trader.log",
    max_file_size: str = "10MB",
    backup_count: int = 5,
) -> None:
    """
    Set up application logging with structlog.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: Log format ('structured' or 'plain')
        file_enabled: Whether to enable file logging
        file_path: Path to log file
        max_file_size: Maximum size of log file before rotation
        backup_count: Number of backup log files to keep
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    processors: list[Processor] = [
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if format_type == "structured":
        # JSON when a file sink is attached, console otherwise
        processors.append(
            structlog.dev.ConsoleRenderer()
            if not file_enabled
            else structlog.processors.JSONRenderer()
        )
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    if file_enabled:
        _setup_file_logging(file_path, max_file_size, backup_count, log_level)


def _setup_file_logging(
    file_path: str,
    max_file_size: str,
    backup_count: int,
    log_level: int,
) -> None:
    """Set up rotating file handler for logging."""
    log_file = Path(file_path)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.handlers.RotatingFileHandler(
        filename=log_file,
        maxBytes=_parse_file_size(max_file_size),
        backupCount=backup_count,
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(logging.Formatter("%(message)s"))

    logging.getLogger().addHandler(file_handler)


def _parse_file_size(size_str: str) -> int:
    """Parse file size string into bytes."""
    size_str = size_str.strip().upper()

    if size_str.endswith("KB"):
        return int(size_str[:-2]) * 1024
    elif size_str.endswith("MB"):
        return int(size_str[:-2]) * 1024 * 1024
    elif size_str.endswith("GB"):
        return int(size_str[:-2]) * 1024 * 1024 * 1024
    else:
        # Assume bytes
        return int(size_str)


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (defaults to calling module)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


def log_audit_event(event: str, user_id: Optional[str] = None, **context: Any) -> None:
    """
    Log an audit event.

    Trades and portfolio resets are logged under the "audit" logger name.

    Args:
        event: Description of the event
        user_id: ID of the user who triggered the event
        **context: Additional context
    """
    logger = get_logger("audit")
    logger.info(
        "Audit event",
        audit_event=event,
        user_id=user_id,
        **context,
    )
