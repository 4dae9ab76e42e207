"""
Core Primitives
===============

This package contains:
    - polling: Deadline-bounded condition polling
"""

from automator.core.polling import DEFAULT_POLL_INTERVAL, Deadline, await_condition

__all__ = [
    "DEFAULT_POLL_INTERVAL",
    "Deadline",
    "await_condition",
]
