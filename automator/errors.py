"""
Automation Errors
=================

Exception taxonomy for device automation.

"Element not found" is not an exception: selector-based interactions report
it as an ``ElementNotFound`` result. These exceptions describe genuine faults
and end up wrapped in an ``Error`` result or raised from transport helpers.
"""

from typing import Optional, Sequence


class AutomationError(Exception):
    """Base class for all automation failures."""


class TransportError(AutomationError):
    """A device command or live-handle call failed."""

    def __init__(
        self,
        message: str,
        command: Optional[Sequence[str]] = None,
        returncode: Optional[int] = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = list(command) if command else []
        self.returncode = returncode
        self.stderr = stderr


class ParseError(AutomationError):
    """A UI hierarchy dump could not be tokenized."""


class AutomationTimeoutError(AutomationError):
    """A bounded wait exhausted its deadline without the condition holding."""

    def __init__(self, message: str, timeout: float) -> None:
        super().__init__(message)
        self.timeout = timeout
