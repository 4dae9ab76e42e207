"""
Automation Runner
=================

Run an automation script against an interactor under an outer timeout.

If the script fails, the runner makes one best-effort screen dump so the
failure report shows what was on screen, then re-raises the original error.

Usage:
    from automator.runner import device_test

    async def login(device):
        await device.launch_app("com.example.app")
        assert await device.wait_for(ByText("Sign in"))
        await device.click(ByText("Sign in"))

    await device_test(interactor, login, timeout=60)
"""

import asyncio
import sys
from typing import Awaitable, Callable, Optional, TypeVar

from automator.config import get_settings
from automator.device.adb_device import ADBDeviceInteractor
from automator.device.interactor import DeviceInteractor
from automator.utils.logger import LogContext, get_logger, setup_logging

logger = get_logger(__name__)

I = TypeVar("I", bound=DeviceInteractor)

Script = Callable[[I], Awaitable[None]]


async def capture_failure_screen(interactor: DeviceInteractor) -> str:
    """
    Render the current screen for a failure report.

    Never raises: if the dump itself fails the text says so.
    """
    try:
        screen = await interactor.dump_screen()
        return screen.pretty_print()
    except Exception as e:
        return f"(Could not dump screen: {e})"


async def device_test(
    interactor: I,
    block: Script,
    timeout: Optional[float] = None,
) -> None:
    """
    Run ``block(interactor)`` with an outer timeout and failure diagnostics.

    Args:
        interactor: Backend to drive.
        block: Async automation script.
        timeout: Seconds for the whole script (defaults to settings).

    Raises:
        Whatever the script raised, or asyncio.TimeoutError on timeout.
    """
    timeout = timeout if timeout is not None else get_settings().automation.run_timeout

    try:
        await asyncio.wait_for(block(interactor), timeout=timeout)
    except Exception as e:
        reason = "timed out" if isinstance(e, asyncio.TimeoutError) else str(e)
        logger.error("Automation run failed", error=reason, error_type=type(e).__name__)

        dump = await capture_failure_screen(interactor)
        print(f"\n!!! TEST FAILED: {reason}", file=sys.stderr)
        print("\n--- Screen dump at failure ---", file=sys.stderr)
        print(dump, file=sys.stderr)
        raise


def run(
    block: Script,
    serial: Optional[str] = None,
    timeout: Optional[float] = None,
) -> None:
    """
    Synchronous entry point: configure logging, build an ADB interactor, run.

    Args:
        block: Async automation script receiving the interactor.
        serial: Optional device serial (defaults to ADB_DEVICE_SERIAL).
        timeout: Seconds for the whole script (defaults to settings).
    """
    setup_logging()
    interactor = ADBDeviceInteractor(serial=serial)

    with LogContext(serial=interactor.transport.serial or "default"):
        asyncio.run(device_test(interactor, block, timeout=timeout))
