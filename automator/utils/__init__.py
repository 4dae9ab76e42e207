"""
Utility modules for the Android Device Automator.

This package contains:
    - logger: Structured logging with structlog
"""

from automator.utils.logger import LogContext, get_logger, setup_logging

__all__ = [
    "get_logger",
    "setup_logging",
    "LogContext",
]
