"""
ADB Shell Device Interactor
===========================

Device automation using nothing but ``adb`` shell commands.

There are no live element handles over the shell. Every query dumps the
window hierarchy to a file on the device, reads it back with ``cat`` and
parses it, and every selector-based interaction acts on the bounds recorded
in that dump. If the UI moves between the dump and the injected input, the
tap lands where the element *was*.

Prerequisites:
    1. Android SDK platform-tools (adb) in PATH or ANDROID_HOME set
    2. An emulator running or a device connected with USB debugging

Usage:
    from automator.device import ADBDeviceInteractor

    device = ADBDeviceInteractor(serial="emulator-5554")
    await device.launch_app("com.android.settings")
    await device.click(ByText("Display"))
"""

import asyncio
import re
from dataclasses import dataclass
from typing import AsyncContextManager, AsyncIterator, Optional, Union

from automator.config import Settings, get_settings
from automator.core.polling import await_condition
from automator.device.interactor import DeviceInteractor, swipe_coordinates
from automator.device.logcat import LogcatCapture
from automator.device.screenshot import Screenshot, screenshot_from_png
from automator.device.transport import ADBTransport
from automator.errors import AutomationError, AutomationTimeoutError, TransportError
from automator.model.results import (
    ElementNotFound,
    Error,
    InteractionResult,
    Success,
    SwipeDirection,
)
from automator.model.screen_node import Bounds, ScreenNode
from automator.model.selector import Selector
from automator.perception.hierarchy_parser import looks_like_hierarchy, parse_hierarchy
from automator.utils.logger import get_logger

logger = get_logger(__name__)

# Older Android releases report mResumedActivity, newer ones topResumedActivity
_RESUMED_ACTIVITY_RE = re.compile(
    r"(?:mResumedActivity|topResumedActivity).*?([a-zA-Z][a-zA-Z0-9_.]*)/"
)
_SIZE_RE = re.compile(r"(\d+)x(\d+)")
_OVERRIDE_SIZE_RE = re.compile(r"Override size:\s*(\d+)x(\d+)")
_DENSITY_RE = re.compile(r"(\d+)")
_OVERRIDE_DENSITY_RE = re.compile(r"Override density:\s*(\d+)")

# Characters the device shell would otherwise interpret in `input text`
_INPUT_TEXT_ESCAPES = [
    ("\\", "\\\\"),
    (" ", "%s"),
    ("&", "\\&"),
    ("<", "\\<"),
    (">", "\\>"),
    ("(", "\\("),
    (")", "\\)"),
    ("|", "\\|"),
    (";", "\\;"),
    ("'", "\\'"),
    ('"', '\\"'),
    ("`", "\\`"),
    ("$", "\\$"),
]


def escape_input_text(text: str) -> str:
    """Escape text for ``adb shell input text`` (spaces become ``%s``)."""
    for char, replacement in _INPUT_TEXT_ESCAPES:
        text = text.replace(char, replacement)
    return text


def parse_foreground_package(dumpsys_output: str) -> Optional[str]:
    """Extract the resumed activity's package from ``dumpsys activity activities``."""
    for line in dumpsys_output.splitlines():
        match = _RESUMED_ACTIVITY_RE.search(line)
        if match:
            return match.group(1)
    return None


@dataclass
class DeviceInfo:
    """
    Basic facts about the connected device.

    Attributes:
        serial: Device serial, or None for adb's default device.
        display_width: Screen width in pixels.
        display_height: Screen height in pixels.
        density: Screen density in dpi (0 if unknown).
        current_package: Foreground package, if any.
    """

    serial: Optional[str]
    display_width: int
    display_height: int
    density: int = 0
    current_package: Optional[str] = None


class ADBDeviceInteractor(DeviceInteractor):
    """
    Device interactor over the adb shell.

    Display size and density are queried once and cached for the lifetime
    of the instance; nothing about the UI itself is cached.
    """

    def __init__(
        self,
        transport: Optional[ADBTransport] = None,
        adb_path: Optional[str] = None,
        serial: Optional[str] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        """
        Initialize the interactor.

        Args:
            transport: Ready transport. If None, one is built from the other arguments.
            adb_path: Optional path to adb (defaults to settings, then PATH).
            serial: Optional device serial (defaults to ADB_DEVICE_SERIAL).
            settings: Settings to use instead of the cached global settings.
        """
        settings = settings or get_settings()

        self.transport = transport or ADBTransport(
            adb_path=adb_path or settings.device.adb_path or None,
            serial=serial or settings.device.adb_device_serial or None,
            timeout=settings.device.adb_command_timeout,
        )
        self.automation = settings.automation
        self.dump_path = settings.device.dump_path

        self._logcat = LogcatCapture(self.transport)
        self._display_size: Optional[tuple[int, int]] = None
        self._display_density: Optional[int] = None

    # Device facts

    async def get_display_size(self) -> tuple[int, int]:
        """
        Screen size in pixels, from ``wm size``. Cached after the first success.

        Raises:
            TransportError: If the size cannot be determined.
        """
        if self._display_size is not None:
            return self._display_size

        result = await self.transport.shell("wm", "size")
        # "Physical size: 1080x2400" and optionally "Override size: 720x1600"
        match = _OVERRIDE_SIZE_RE.search(result.stdout) or _SIZE_RE.search(result.stdout)
        if not match:
            raise TransportError(
                f"Could not determine display size from output: {result.stdout.strip()}"
            )

        self._display_size = (int(match.group(1)), int(match.group(2)))
        logger.debug("Display size", width=self._display_size[0], height=self._display_size[1])
        return self._display_size

    async def get_display_density(self) -> int:
        """Screen density in dpi from ``wm density``, or 0 if unknown."""
        if self._display_density is not None:
            return self._display_density

        result = await self.transport.shell("wm", "density")
        match = _OVERRIDE_DENSITY_RE.search(result.stdout) or _DENSITY_RE.search(result.stdout)
        if not match:
            return 0

        self._display_density = int(match.group(1))
        return self._display_density

    async def get_current_package(self) -> Optional[str]:
        """Package name of the foreground activity, or None."""
        result = await self.transport.shell("dumpsys", "activity", "activities")
        return parse_foreground_package(result.stdout)

    async def device_info(self) -> DeviceInfo:
        width, height = await self.get_display_size()
        return DeviceInfo(
            serial=self.transport.serial,
            display_width=width,
            display_height=height,
            density=await self.get_display_density(),
            current_package=await self.get_current_package(),
        )

    # App lifecycle

    async def launch_app(self, package_name: str, timeout: float = 15.0) -> InteractionResult:
        try:
            # monkey resolves the launcher activity without us knowing its name
            await self.transport.shell(
                "monkey", "-p", package_name,
                "-c", "android.intent.category.LAUNCHER", "1",
            )
        except TransportError as e:
            logger.error("App launch failed", package=package_name, error=str(e))
            return Error(e)

        launched = await await_condition(
            lambda: self.is_app_running(package_name),
            timeout=timeout,
            poll_interval=self.automation.poll_interval,
        )
        if launched:
            logger.info("App launched", package=package_name)
            return Success(f"App launched: {package_name}")

        logger.warning("App launch timed out", package=package_name, timeout=timeout)
        return Error(
            AutomationTimeoutError(f"Timeout waiting for {package_name} to launch", timeout)
        )

    async def stop_app(self, package_name: str) -> InteractionResult:
        try:
            await self.transport.shell("am", "force-stop", package_name)
        except TransportError as e:
            return Error(e)
        logger.debug("App stopped", package=package_name)
        return Success(f"App stopped: {package_name}")

    async def is_app_running(self, package_name: str) -> bool:
        try:
            return await self.get_current_package() == package_name
        except TransportError as e:
            logger.warning("Foreground check failed", package=package_name, error=str(e))
            return False

    # Screen

    async def dump_screen(self) -> ScreenNode:
        try:
            # A dump that fails quietly must not leave the previous file readable
            await self.transport.shell("rm", "-f", self.dump_path)
            await self.transport.shell("uiautomator", "dump", self.dump_path)
            result = await self.transport.shell("cat", self.dump_path)

            if not looks_like_hierarchy(result.stdout):
                logger.warning("UI dump was empty", output=result.stdout.strip()[:200])
                return ScreenNode.empty()

            return parse_hierarchy(result.stdout)

        except Exception as e:
            logger.error("Failed to get UI hierarchy", error=str(e))
            return ScreenNode.empty()

    async def screen_contains(self, selector: Selector) -> bool:
        screen = await self.dump_screen()
        return screen.contains(selector)

    # Waiting

    async def wait_for(self, selector: Selector, timeout: float = 5.0) -> bool:
        return await await_condition(
            lambda: self.screen_contains(selector),
            timeout=timeout,
            poll_interval=self.automation.poll_interval,
        )

    async def wait_for_idle(self, timeout: float = 5.0) -> None:
        # The shell exposes no idle signal; a short settle delay stands in for it
        await asyncio.sleep(min(timeout, 1.0))

    # Interactions

    async def _locate(self, selector: Selector) -> Union[Bounds, ElementNotFound, Error]:
        screen = await self.dump_screen()
        node = screen.first(selector)
        if node is None:
            return ElementNotFound(selector)
        if node.bounds is None:
            return Error(AutomationError(f"Node has no bounds: {selector}"))
        return node.bounds

    async def _tap(self, x: int, y: int) -> None:
        await self.transport.shell("input", "tap", str(x), str(y))

    async def click(self, selector: Selector) -> InteractionResult:
        target = await self._locate(selector)
        if not isinstance(target, Bounds):
            return target

        try:
            await self._tap(target.center_x, target.center_y)
        except TransportError as e:
            return Error(e)

        logger.debug("Tap performed", selector=str(selector), x=target.center_x, y=target.center_y)
        return Success(f"Clicked: {selector}")

    async def click_at(self, x: int, y: int) -> None:
        await self._tap(x, y)

    async def long_click(self, selector: Selector) -> InteractionResult:
        target = await self._locate(selector)
        if not isinstance(target, Bounds):
            return target

        x, y = str(target.center_x), str(target.center_y)
        try:
            # Long press via swipe with same start/end coordinates
            await self.transport.shell(
                "input", "swipe", x, y, x, y, str(self.automation.long_click_ms)
            )
        except TransportError as e:
            return Error(e)

        logger.debug("Long press performed", selector=str(selector), x=x, y=y)
        return Success(f"Long clicked: {selector}")

    async def type_text(self, selector: Selector, text: str) -> InteractionResult:
        target = await self._locate(selector)
        if not isinstance(target, Bounds):
            return target

        try:
            await self._tap(target.center_x, target.center_y)
            await asyncio.sleep(self.automation.type_settle_delay)
            await self._input_text(text)
        except TransportError as e:
            return Error(e)

        logger.debug("Text typed", selector=str(selector), length=len(text))
        return Success(f"Typed text: {text}")

    async def clear_and_type(self, selector: Selector, text: str) -> InteractionResult:
        target = await self._locate(selector)
        if not isinstance(target, Bounds):
            return target

        try:
            await self._tap(target.center_x, target.center_y)
            await asyncio.sleep(self.automation.type_settle_delay)
            # No select-all over the shell: jump to the end and delete backwards
            deletes = ["KEYCODE_DEL"] * self.automation.clear_key_presses
            await self.transport.shell("input", "keyevent", "KEYCODE_MOVE_END", *deletes)
            await asyncio.sleep(0.1)
            await self._input_text(text)
        except TransportError as e:
            return Error(e)

        logger.debug("Field cleared and typed", selector=str(selector), length=len(text))
        return Success(f"Cleared and typed: {text}")

    async def swipe(self, direction: SwipeDirection, steps: int = 20) -> InteractionResult:
        try:
            direction = SwipeDirection.parse(direction)
            width, height = await self.get_display_size()
            coords = swipe_coordinates(direction, width, height)
            # uiautomator swipes take ~5ms per step
            duration_ms = steps * 5
            await self.transport.shell(
                "input", "swipe", *(str(c) for c in coords), str(duration_ms)
            )
        except (TransportError, ValueError) as e:
            return Error(e)

        logger.debug("Swipe performed", direction=direction.value, steps=steps)
        return Success(f"Swiped: {direction.value}")

    # Buttons

    async def press_back(self) -> None:
        await self.transport.shell("input", "keyevent", "KEYCODE_BACK")

    async def press_home(self) -> None:
        await self.transport.shell("input", "keyevent", "KEYCODE_HOME")

    async def press_recent_apps(self) -> None:
        await self.transport.shell("input", "keyevent", "KEYCODE_APP_SWITCH")

    async def press_key_event(self, key_code: int) -> None:
        await self.transport.shell("input", "keyevent", str(key_code))

    async def input_raw_text(self, text: str) -> None:
        await self._input_text(text)

    async def _input_text(self, text: str) -> None:
        await self.transport.shell("input", "text", escape_input_text(text))

    # Output & debug

    def logcat(self) -> AsyncContextManager[AsyncIterator[str]]:
        return self._logcat.stream()

    async def logcat_dump(self, lines: int = 500) -> str:
        return await self._logcat.capture(lines)

    async def logcat_clear(self) -> None:
        await self._logcat.clear()

    async def take_screenshot(self, name: str = "screenshot") -> Optional[Screenshot]:
        try:
            # exec-out gives binary-safe output
            data = await self.transport.run_bytes("exec-out", "screencap", "-p")
            shot = screenshot_from_png(name, data)
        except (TransportError, ValueError) as e:
            logger.warning("Could not take screenshot", name=name, error=str(e))
            return None

        logger.debug("Screenshot captured", name=name, size_kb=len(shot.png) // 1024)
        return shot
