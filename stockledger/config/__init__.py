"""Configuration module."""

from stockledger.config.logging import configure_logging, get_logger, report_context
from stockledger.config.settings import Settings, get_settings, reset_settings

__all__ = [
    "Settings",
    "get_settings",
    "reset_settings",
    "configure_logging",
    "get_logger",
    "report_context",
]
