"""Configuration management for Apex Trader."""

from .logging import get_logger, log_audit_event, setup_logging
from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings", "setup_logging", "get_logger", "log_audit_event"]
