"""
Device Interactor Contract
==========================

Abstract base class defining the operations every backend provides.

Two backends implement it:
    - ADBDeviceInteractor: adb shell only; dumps and parses the hierarchy
      for every query and injects input with ``input`` commands.
    - DirectDeviceInteractor: live uiautomator2 handle; resolves selectors
      to live elements and reads their bounds at call time.

Shared semantics:
    - ``dump_screen`` never raises; failures give ``ScreenNode.empty()``.
    - Selector-based interactions return ``ElementNotFound`` when nothing
      matches, ``Error`` when the transport fails, ``Success`` otherwise.
    - When several nodes match, the first one in pre-order is used.
    - ``click_at``, key presses and raw text input are fire-and-forget.

Usage:
    interactor = ADBDeviceInteractor(serial="emulator-5554")
    await interactor.launch_app("com.android.settings")
    await interactor.wait_for(ByText("Network & internet"))
    result = await interactor.click(ByText("Network & internet"))
"""

import asyncio
from abc import ABC, abstractmethod
from typing import AsyncContextManager, AsyncIterator, Optional

from automator.device.screenshot import Screenshot
from automator.model.results import (
    ElementNotFound,
    InteractionResult,
    Success,
    SwipeDirection,
)
from automator.model.screen_node import ScreenNode
from automator.model.selector import Selector
from automator.utils.logger import get_logger

logger = get_logger(__name__)

SWIPE_MARGIN = 100


def swipe_coordinates(
    direction: SwipeDirection, width: int, height: int, margin: int = SWIPE_MARGIN
) -> tuple[int, int, int, int]:
    """
    Full-screen swipe path ``(start_x, start_y, end_x, end_y)``.

    The gesture runs through the screen center and stops ``margin`` pixels
    short of the edges so it does not trigger system edge gestures.
    """
    cx, cy = width // 2, height // 2

    if direction == SwipeDirection.UP:
        return cx, height - margin, cx, margin
    if direction == SwipeDirection.DOWN:
        return cx, margin, cx, height - margin
    if direction == SwipeDirection.LEFT:
        return width - margin, cy, margin, cy
    if direction == SwipeDirection.RIGHT:
        return margin, cy, width - margin, cy
    raise TypeError(f"Unsupported direction: {direction!r}")


class DeviceInteractor(ABC):
    """
    Abstract base class for device automation backends.

    Holds no state of its own; each backend owns its transport.
    """

    # App lifecycle

    @abstractmethod
    async def launch_app(self, package_name: str, timeout: float = 15.0) -> InteractionResult:
        """
        Start an app and wait until it is in the foreground.

        Args:
            package_name: Android package name (e.g., com.android.settings).
            timeout: Seconds to wait for the app to reach the foreground.

        Returns:
            Success, or Error wrapping AutomationTimeoutError on timeout.
        """

    @abstractmethod
    async def stop_app(self, package_name: str) -> InteractionResult:
        """Force-stop an app."""

    @abstractmethod
    async def is_app_running(self, package_name: str) -> bool:
        """Whether the app currently owns the foreground."""

    # Screen

    @abstractmethod
    async def dump_screen(self) -> ScreenNode:
        """
        Capture the current UI hierarchy.

        Returns:
            A fresh snapshot tree, or ``ScreenNode.empty()`` if the dump failed.
        """

    async def print_screen(self) -> None:
        """Print the current screen tree."""
        screen = await self.dump_screen()
        await self.terminal_print(screen.pretty_print())

    @abstractmethod
    async def screen_contains(self, selector: Selector) -> bool:
        """Whether any element on the current screen matches."""

    # Waiting

    @abstractmethod
    async def wait_for(self, selector: Selector, timeout: float = 5.0) -> bool:
        """Poll until the selector matches or the timeout elapses."""

    @abstractmethod
    async def wait_for_idle(self, timeout: float = 5.0) -> None:
        """Wait for the UI to settle (best effort)."""

    async def delay(self, seconds: float) -> None:
        await asyncio.sleep(seconds)

    # Interactions

    @abstractmethod
    async def click(self, selector: Selector) -> InteractionResult:
        """Tap the center of the first matching element."""

    @abstractmethod
    async def click_at(self, x: int, y: int) -> None:
        """Tap screen coordinates."""

    @abstractmethod
    async def long_click(self, selector: Selector) -> InteractionResult:
        """Press and hold the first matching element."""

    @abstractmethod
    async def type_text(self, selector: Selector, text: str) -> InteractionResult:
        """Focus the first matching element and type text into it."""

    @abstractmethod
    async def clear_and_type(self, selector: Selector, text: str) -> InteractionResult:
        """Focus the first matching element, clear it, then type text."""

    @abstractmethod
    async def swipe(self, direction: SwipeDirection, steps: int = 20) -> InteractionResult:
        """
        Swipe across the screen.

        Args:
            direction: Direction of finger movement.
            steps: Gesture granularity; larger is slower.
        """

    async def scroll_until_found(
        self,
        selector: Selector,
        direction: SwipeDirection = SwipeDirection.DOWN,
        max_scrolls: int = 5,
        delay_between: float = 0.5,
    ) -> InteractionResult:
        """
        Swipe until the selector matches.

        The screen is checked before every swipe and once more after the
        last one, so a target revealed by the final swipe is still found.

        Args:
            selector: Element to look for.
            direction: Swipe direction.
            max_scrolls: Maximum number of swipes.
            delay_between: Seconds to let the UI settle after each swipe.

        Returns:
            Success if found, ElementNotFound otherwise.
        """
        direction = SwipeDirection.parse(direction)

        for attempt in range(max_scrolls):
            if await self.screen_contains(selector):
                return Success(f"Found after scrolling: {selector}")
            result = await self.swipe(direction)
            if not result.is_success:
                logger.warning("Swipe failed while scrolling", attempt=attempt, result=result.message)
            await asyncio.sleep(delay_between)

        if await self.screen_contains(selector):
            return Success(f"Found after scrolling: {selector}")
        return ElementNotFound(selector)

    # Buttons

    @abstractmethod
    async def press_back(self) -> None:
        pass

    @abstractmethod
    async def press_home(self) -> None:
        pass

    @abstractmethod
    async def press_recent_apps(self) -> None:
        pass

    @abstractmethod
    async def press_key_event(self, key_code: int) -> None:
        """Send an Android key code (e.g. 66 for ENTER)."""

    @abstractmethod
    async def input_raw_text(self, text: str) -> None:
        """Type text into whatever currently has focus."""

    # Output & debug

    async def terminal_print(self, message: str) -> None:
        print(message)

    @abstractmethod
    def logcat(self) -> AsyncContextManager[AsyncIterator[str]]:
        """
        Live log lines, scoped to an ``async with`` block.

        The reader process is stopped when the block exits.
        """

    @abstractmethod
    async def logcat_dump(self, lines: int = 500) -> str:
        """The last ``lines`` lines of the device log."""

    @abstractmethod
    async def logcat_clear(self) -> None:
        pass

    @abstractmethod
    async def take_screenshot(self, name: str = "screenshot") -> Optional[Screenshot]:
        """Capture the screen, or None if capture failed."""
