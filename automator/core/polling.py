"""
Deadline-Bounded Polling
========================

The single retry primitive behind every "wait for state" operation.

The deadline is absolute and computed once at call entry. The condition is
checked, then the task sleeps ``poll_interval``, until the condition holds or
the deadline has passed. A check is only started while time remains, so the
worst-case latency is ``timeout + poll_interval``.

Usage:
    from automator.core.polling import await_condition

    found = await await_condition(
        lambda: interactor.screen_contains(ByText("Done")),
        timeout=5.0,
    )
"""

import asyncio
import inspect
import time
from typing import Awaitable, Callable, Union

from automator.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_POLL_INTERVAL = 0.25

Condition = Callable[[], Union[bool, Awaitable[bool]]]


class Deadline:
    """An absolute point on the monotonic clock."""

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        self.expires_at = time.monotonic() + timeout

    @property
    def remaining(self) -> float:
        return max(0.0, self.expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        return time.monotonic() >= self.expires_at


async def await_condition(
    check: Condition,
    timeout: float,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
) -> bool:
    """
    Repeat ``check`` until it returns True or the deadline passes.

    Args:
        check: Sync or async callable returning a truthy value when done.
        timeout: Seconds until the deadline.
        poll_interval: Seconds to sleep between checks.

    Returns:
        True as soon as a check succeeds, False once the deadline has passed.
    """
    deadline = Deadline(timeout)
    attempts = 0

    while not deadline.expired:
        attempts += 1
        outcome = check()
        if inspect.isawaitable(outcome):
            outcome = await outcome
        if outcome:
            return True
        await asyncio.sleep(poll_interval)

    logger.debug("Condition not met before deadline", timeout=timeout, attempts=attempts)
    return False
