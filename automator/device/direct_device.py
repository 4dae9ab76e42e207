"""
Direct Device Interactor
========================

Device automation through a live uiautomator2 handle.

Selectors resolve to live UI objects on the device, so single-element
operations never materialize the whole tree. Tap coordinates come from the
element's visible bounds at the moment of the call, not from an earlier
dump. ``dump_screen`` still builds a full ScreenNode snapshot.

Usage:
    from automator.device import DirectDeviceInteractor

    device = await DirectDeviceInteractor.connect("emulator-5554")
    await device.click(ByResourceId("login_button"))
"""

import asyncio
import re
from typing import Any, AsyncContextManager, AsyncIterator, Optional, Union

import uiautomator2 as u2
from uiautomator2.exceptions import UiObjectNotFoundError

from automator.config import Settings, get_settings
from automator.core.polling import await_condition
from automator.device.interactor import DeviceInteractor, swipe_coordinates
from automator.device.logcat import LogcatCapture
from automator.device.screenshot import Screenshot, screenshot_from_image
from automator.device.transport import ADBTransport
from automator.errors import AutomationTimeoutError
from automator.model.results import (
    ElementNotFound,
    Error,
    InteractionResult,
    Success,
    SwipeDirection,
)
from automator.model.screen_node import ScreenNode
from automator.model.selector import (
    ByClassName,
    ByDescription,
    ByResourceId,
    ByText,
    Selector,
)
from automator.perception.hierarchy_parser import parse_hierarchy
from automator.utils.logger import get_logger

logger = get_logger(__name__)


def selector_kwargs(selector: Selector) -> dict[str, str]:
    """
    Translate a Selector into uiautomator2 selector keyword arguments.

    Resource ids match as substrings and non-exact text matches
    case-insensitively, mirroring ``ScreenNode.matches``.
    """
    if isinstance(selector, ByResourceId):
        return {"resourceIdMatches": f".*{re.escape(selector.id)}.*"}
    if isinstance(selector, ByText):
        if selector.exact:
            return {"text": selector.text}
        return {"textMatches": f"(?is).*{re.escape(selector.text)}.*"}
    if isinstance(selector, ByClassName):
        return {"className": selector.class_name}
    if isinstance(selector, ByDescription):
        return {"description": selector.description}
    raise TypeError(f"Unsupported selector: {selector!r}")


def _center(info: dict[str, Any]) -> tuple[int, int]:
    bounds = info.get("visibleBounds") or info["bounds"]
    return (
        (bounds["left"] + bounds["right"]) // 2,
        (bounds["top"] + bounds["bottom"]) // 2,
    )


class DirectDeviceInteractor(DeviceInteractor):
    """
    Device interactor over a live uiautomator2 ``Device``.

    uiautomator2 calls are blocking HTTP requests, so each one runs in a
    worker thread.
    """

    def __init__(
        self,
        device: "u2.Device",
        transport: Optional[ADBTransport] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        """
        Initialize the interactor.

        Args:
            device: Connected uiautomator2 device.
            transport: ADB transport for log streaming (built from the device serial if None).
            settings: Settings to use instead of the cached global settings.
        """
        settings = settings or get_settings()

        self.device = device
        self.automation = settings.automation
        self.transport = transport or ADBTransport(
            adb_path=settings.device.adb_path or None,
            serial=getattr(device, "serial", None),
            timeout=settings.device.adb_command_timeout,
        )
        self._logcat = LogcatCapture(self.transport)

    @classmethod
    async def connect(
        cls,
        serial: Optional[str] = None,
        settings: Optional[Settings] = None,
    ) -> "DirectDeviceInteractor":
        """Connect to a device with uiautomator2 (auto-detect if no serial)."""
        settings = settings or get_settings()
        serial = serial or settings.device.adb_device_serial or None

        logger.info("Connecting to device", serial=serial or "auto-detect")
        device = await asyncio.to_thread(u2.connect, serial)
        return cls(device, settings=settings)

    async def _call(self, fn: Any, *args: Any, **kwargs: Any) -> Any:
        return await asyncio.to_thread(fn, *args, **kwargs)

    # App lifecycle

    async def launch_app(self, package_name: str, timeout: float = 15.0) -> InteractionResult:
        try:
            await self._call(self.device.app_start, package_name)
        except Exception as e:
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
            await self._call(self.device.app_stop, package_name)
        except Exception as e:
            return Error(e)
        return Success(f"App stopped: {package_name}")

    async def is_app_running(self, package_name: str) -> bool:
        try:
            current = await self._call(self.device.app_current)
        except Exception as e:
            logger.debug("Foreground check failed", package=package_name, error=str(e))
            return False
        return current.get("package") == package_name

    # Screen

    async def dump_screen(self) -> ScreenNode:
        try:
            xml_content = await self._call(self.device.dump_hierarchy)
            return parse_hierarchy(xml_content)
        except Exception as e:
            logger.error("Failed to get UI hierarchy", error=str(e))
            return ScreenNode.empty()

    async def _find(self, selector: Selector) -> Optional[Any]:
        obj = self.device(**selector_kwargs(selector))
        exists = await self._call(lambda: bool(obj.exists))
        return obj if exists else None

    async def screen_contains(self, selector: Selector) -> bool:
        try:
            return await self._find(selector) is not None
        except Exception as e:
            logger.warning("Element lookup failed", selector=str(selector), error=str(e))
            return False

    # Waiting

    async def wait_for(self, selector: Selector, timeout: float = 5.0) -> bool:
        return await await_condition(
            lambda: self.screen_contains(selector),
            timeout=timeout,
            poll_interval=self.automation.poll_interval,
        )

    async def wait_for_idle(self, timeout: float = 5.0) -> None:
        """Wait until two consecutive hierarchy dumps are identical."""
        previous: list[Optional[str]] = [None]

        async def settled() -> bool:
            current = await self._call(self.device.dump_hierarchy)
            same = current == previous[0]
            previous[0] = current
            return same

        try:
            await await_condition(settled, timeout=timeout, poll_interval=self.automation.poll_interval)
        except Exception as e:
            logger.warning("Idle wait aborted", error=str(e))

    # Interactions

    async def _resolve(self, selector: Selector) -> Union[tuple[Any, int, int], ElementNotFound, Error]:
        """Live element plus the center of its current visible bounds."""
        try:
            obj = await self._find(selector)
            if obj is None:
                return ElementNotFound(selector)
            info = await self._call(lambda: obj.info)
        except UiObjectNotFoundError:
            return ElementNotFound(selector)
        except Exception as e:
            return Error(e)

        x, y = _center(info)
        return obj, x, y

    async def click(self, selector: Selector) -> InteractionResult:
        target = await self._resolve(selector)
        if not isinstance(target, tuple):
            return target
        _, x, y = target

        try:
            await self._call(self.device.click, x, y)
        except Exception as e:
            return Error(e)

        logger.debug("Tap performed", selector=str(selector), x=x, y=y)
        return Success(f"Clicked: {selector}")

    async def click_at(self, x: int, y: int) -> None:
        await self._call(self.device.click, x, y)

    async def long_click(self, selector: Selector) -> InteractionResult:
        target = await self._resolve(selector)
        if not isinstance(target, tuple):
            return target
        _, x, y = target

        try:
            # No long-press primitive: hold a zero-length swipe in place
            await self._call(
                self.device.swipe, x, y, x, y,
                duration=self.automation.long_click_ms / 1000,
            )
        except Exception as e:
            return Error(e)

        logger.debug("Long press performed", selector=str(selector), x=x, y=y)
        return Success(f"Long clicked: {selector}")

    async def type_text(self, selector: Selector, text: str) -> InteractionResult:
        target = await self._resolve(selector)
        if not isinstance(target, tuple):
            return target
        obj, x, y = target

        try:
            await self._call(self.device.click, x, y)
            await self._call(obj.set_text, text)
        except UiObjectNotFoundError:
            return ElementNotFound(selector)
        except Exception as e:
            return Error(e)

        logger.debug("Text typed", selector=str(selector), length=len(text))
        return Success(f"Typed text: {text}")

    async def clear_and_type(self, selector: Selector, text: str) -> InteractionResult:
        target = await self._resolve(selector)
        if not isinstance(target, tuple):
            return target
        obj, x, y = target

        try:
            await self._call(self.device.click, x, y)
            await self._call(obj.clear_text)
            await self._call(obj.set_text, text)
        except UiObjectNotFoundError:
            return ElementNotFound(selector)
        except Exception as e:
            return Error(e)

        logger.debug("Field cleared and typed", selector=str(selector), length=len(text))
        return Success(f"Cleared and typed: {text}")

    async def swipe(self, direction: SwipeDirection, steps: int = 20) -> InteractionResult:
        try:
            direction = SwipeDirection.parse(direction)
            width, height = await self._call(self.device.window_size)
            coords = swipe_coordinates(direction, width, height)
            await self._call(self.device.swipe, *coords, steps=steps)
        except Exception as e:
            return Error(e)

        logger.debug("Swipe performed", direction=direction.value, steps=steps)
        return Success(f"Swiped: {direction.value}")

    # Buttons

    async def press_back(self) -> None:
        await self._call(self.device.press, "back")

    async def press_home(self) -> None:
        await self._call(self.device.press, "home")

    async def press_recent_apps(self) -> None:
        await self._call(self.device.press, "recent")

    async def press_key_event(self, key_code: int) -> None:
        await self._call(self.device.press, key_code)

    async def input_raw_text(self, text: str) -> None:
        await self._call(self.device.send_keys, text)

    # Output & debug

    def logcat(self) -> AsyncContextManager[AsyncIterator[str]]:
        return self._logcat.stream()

    async def logcat_dump(self, lines: int = 500) -> str:
        return await self._logcat.capture(lines)

    async def logcat_clear(self) -> None:
        await self._logcat.clear()

    async def take_screenshot(self, name: str = "screenshot") -> Optional[Screenshot]:
        try:
            image = await self._call(self.device.screenshot)
            shot = screenshot_from_image(name, image)
        except Exception as e:
            logger.warning("Could not take screenshot", name=name, error=str(e))
            return None

        logger.debug("Screenshot captured", name=name, width=shot.width, height=shot.height)
        return shot
