"""
ADB Transport
=============

Command/response channel to a device through the ``adb`` executable.

Every call runs ``adb [-s SERIAL] <args>`` with subprocess in a worker
thread, so awaiting it suspends the caller without blocking the event loop.

Usage:
    transport = ADBTransport(serial="emulator-5554")
    result = await transport.shell("wm", "size")
    print(result.stdout)
"""

import asyncio
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from automator.errors import TransportError
from automator.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class CommandResult:
    """Output of one adb invocation."""

    stdout: str
    stderr: str = ""
    returncode: int = 0

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def find_adb() -> Optional[str]:
    """Find the ADB executable in PATH, the Android SDK, or common install paths."""
    adb_in_path = shutil.which("adb")
    if adb_in_path:
        return adb_in_path

    android_home = os.environ.get("ANDROID_HOME") or os.environ.get("ANDROID_SDK_ROOT")
    if android_home:
        adb_candidates = [
            Path(android_home) / "platform-tools" / "adb",
            Path(android_home) / "platform-tools" / "adb.exe",
        ]
        for candidate in adb_candidates:
            if candidate.exists():
                return str(candidate)

    common_paths = [
        Path.home() / "Android" / "Sdk" / "platform-tools" / "adb",
        Path("/usr/local/android-sdk/platform-tools/adb"),
        Path("/opt/android-sdk/platform-tools/adb"),
    ]
    for path in common_paths:
        if path.exists():
            return str(path)

    return None


class ADBTransport:
    """
    Shell-style channel to one device.

    Failures surface as TransportError: adb missing, a command timing out,
    or a nonzero exit status with diagnostic text on stderr.
    """

    def __init__(
        self,
        adb_path: Optional[str] = None,
        serial: Optional[str] = None,
        timeout: float = 30.0,
    ) -> None:
        """
        Initialize the transport.

        Args:
            adb_path: Optional path to adb. If None, searches PATH and ANDROID_HOME.
            serial: Optional device serial (from 'adb devices').
            timeout: Default per-command timeout in seconds.
        """
        self.adb_path = adb_path or find_adb()
        self.serial = serial or None
        self.timeout = timeout

        if not self.adb_path:
            logger.warning(
                "ADB not found. Please install Android SDK platform-tools "
                "and ensure 'adb' is in PATH or set ANDROID_HOME."
            )

    def build_command(self, *args: str) -> list[str]:
        if not self.adb_path:
            raise TransportError("ADB not found. Please install Android SDK platform-tools.")

        cmd = [self.adb_path]
        if self.serial:
            cmd.extend(["-s", self.serial])
        cmd.extend(args)
        return cmd

    async def run(
        self,
        *args: str,
        timeout: Optional[float] = None,
        check: bool = True,
    ) -> CommandResult:
        """
        Run an ADB command.

        Args:
            *args: ADB command arguments.
            timeout: Command timeout in seconds (defaults to the transport timeout).
            check: Raise on a nonzero exit that reported an error.

        Returns:
            CommandResult with decoded output.

        Raises:
            TransportError: If adb is missing, times out, or fails with check=True.
        """
        cmd = self.build_command(*args)
        timeout = timeout if timeout is not None else self.timeout

        logger.debug("Running ADB command", cmd=" ".join(cmd))

        try:
            completed = await asyncio.to_thread(
                subprocess.run,
                cmd,
                capture_output=True,
                timeout=timeout,
                text=True,
                errors="replace",
            )
        except subprocess.TimeoutExpired as e:
            raise TransportError(f"ADB command timed out after {timeout}s", command=cmd) from e
        except OSError as e:
            raise TransportError(f"Could not start adb: {e}", command=cmd) from e

        result = CommandResult(
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            returncode=completed.returncode,
        )

        if check and not result.ok and result.stderr.strip():
            raise TransportError(
                f"adb {' '.join(args)} failed: {result.stderr.strip()}",
                command=cmd,
                returncode=result.returncode,
                stderr=result.stderr,
            )
        return result

    async def shell(self, *args: str, timeout: Optional[float] = None, check: bool = True) -> CommandResult:
        """Run ``adb shell <args>``."""
        return await self.run("shell", *args, timeout=timeout, check=check)

    async def run_bytes(self, *args: str, timeout: Optional[float] = None) -> bytes:
        """Run ADB command and return raw bytes (for screenshots)."""
        cmd = self.build_command(*args)
        timeout = timeout if timeout is not None else self.timeout

        try:
            completed = await asyncio.to_thread(
                subprocess.run,
                cmd,
                capture_output=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise TransportError(f"ADB command timed out after {timeout}s", command=cmd) from e
        except OSError as e:
            raise TransportError(f"Could not start adb: {e}", command=cmd) from e

        if completed.returncode != 0:
            stderr = completed.stderr.decode("utf-8", errors="replace")
            raise TransportError(
                f"adb {' '.join(args)} failed: {stderr.strip()}",
                command=cmd,
                returncode=completed.returncode,
                stderr=stderr,
            )
        return completed.stdout

    async def spawn(self, *args: str) -> asyncio.subprocess.Process:
        """Start a long-running adb process with piped stdout (e.g. ``logcat``)."""
        cmd = self.build_command(*args)
        logger.debug("Spawning ADB process", cmd=" ".join(cmd))
        try:
            return await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError as e:
            raise TransportError(f"Could not start adb: {e}", command=cmd) from e
