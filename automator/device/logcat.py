"""
Logcat Capture
==============

Pull and push access to the device log.

``stream()`` is an async context manager. Entering it starts ``adb logcat``
as a background process and yields an iterator over its lines. Leaving the
block, whether normally, by ``break``, by an exception or by task
cancellation, terminates the process and waits for it before control moves
on.

Usage:
    capture = LogcatCapture(transport)
    async with capture.stream() as lines:
        async for line in lines:
            if "FATAL EXCEPTION" in line:
                break
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

from automator.device.transport import ADBTransport
from automator.errors import TransportError
from automator.utils.logger import get_logger

logger = get_logger(__name__)

_TERMINATE_GRACE = 2.0


class LogcatCapture:
    """Logcat access over an ADB transport."""

    def __init__(self, transport: ADBTransport) -> None:
        self.transport = transport

    @asynccontextmanager
    async def stream(self) -> AsyncIterator[AsyncIterator[str]]:
        """Live log lines until the block exits or logcat ends."""
        process = await self.transport.spawn("logcat")
        logger.debug("Logcat stream started", pid=process.pid)
        lines = None
        try:
            if process.stdout is None:
                raise TransportError("adb logcat was started without a stdout pipe", command=["logcat"])
            lines = _read_lines(process.stdout)
            yield lines
        finally:
            if lines is not None:
                await lines.aclose()
            await _stop_process(process)
            logger.debug("Logcat stream stopped", pid=process.pid)

    async def capture(self, lines: int = 500) -> str:
        """The last ``lines`` lines of the log buffer."""
        result = await self.transport.run("logcat", "-d", "-t", str(lines))
        return result.stdout

    async def clear(self) -> None:
        await self.transport.run("logcat", "-c")


async def _read_lines(stdout: asyncio.StreamReader) -> AsyncIterator[str]:
    while True:
        raw = await stdout.readline()
        if not raw:
            return
        yield raw.decode("utf-8", errors="replace").rstrip("\r\n")


async def _stop_process(process: asyncio.subprocess.Process) -> None:
    if process.returncode is not None:
        return
    try:
        process.terminate()
    except ProcessLookupError:
        return
    try:
        await asyncio.wait_for(process.wait(), timeout=_TERMINATE_GRACE)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
