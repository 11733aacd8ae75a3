"""
Core infrastructure for Copydesk.

Shared components used across all modules:
- Configuration management
- Logging
"""

from .config import Settings, clear_settings_cache, get_settings
from .logging import LogContext, configure_logging, get_logger

__all__ = [
    "Settings",
    "clear_settings_cache",
    "get_settings",
    "LogContext",
    "configure_logging",
    "get_logger",
]
