"""
Shared Test Fixtures
====================

Pytest fixtures used across all test modules.
Provides fake devices behind correctly-typed mocks of the real transports.
"""

import io
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from PIL import Image

from automator.config import AutomationSettings, Settings
from automator.device.adb_device import ADBDeviceInteractor
from automator.device.direct_device import DirectDeviceInteractor
from automator.device.transport import ADBTransport, CommandResult
from automator.errors import TransportError


SAMPLE_HIERARCHY_XML = """<?xml version='1.0' encoding='UTF-8' standalone='yes' ?>
<hierarchy rotation="0">
  <node index="0" text="" resource-id="" class="android.widget.FrameLayout"
        package="com.app" content-desc="" checkable="false" checked="false"
        clickable="false" enabled="true" focusable="false" scrollable="false"
        bounds="[0,0][1080,2400]">
    <node index="0" text="Welcome" resource-id="com.app:id/title"
          class="android.widget.TextView" package="com.app" content-desc=""
          checkable="false" checked="false" clickable="false" enabled="true"
          focusable="false" scrollable="false" bounds="[100,100][980,200]"/>
    <node index="1" text="" resource-id="com.app:id/email_input"
          class="android.widget.EditText" package="com.app" content-desc="Email"
          checkable="false" checked="false" clickable="true" enabled="true"
          focusable="true" scrollable="false" bounds="[100,300][980,400]"/>
    <node index="2" text="" resource-id="com.app:id/list"
          class="androidx.recyclerview.widget.RecyclerView" package="com.app"
          content-desc="" checkable="false" checked="false" clickable="false"
          enabled="true" focusable="true" scrollable="true"
          bounds="[0,500][1080,2000]">
      <node index="0" text="Remember me" resource-id="com.app:id/remember"
            class="android.widget.CheckBox" package="com.app" content-desc=""
            checkable="true" checked="true" clickable="true" enabled="true"
            focusable="true" scrollable="false" bounds="[100,600][500,700]"/>
      <node index="1" text="Login" resource-id="com.app:id/login_button"
            class="android.widget.Button" package="com.app" content-desc=""
            checkable="false" checked="false" clickable="true" enabled="false"
            focusable="true" scrollable="false" bounds="[400,800][680,880]"/>
    </node>
  </node>
</hierarchy>"""


def hierarchy_with(*nodes: str) -> str:
    """Wrap raw <node .../> markup in a hierarchy document."""
    return "<?xml version='1.0' encoding='UTF-8'?><hierarchy rotation=\"0\">" + "".join(nodes) + "</hierarchy>"


def png_bytes(width: int = 40, height: int = 80) -> bytes:
    output = io.BytesIO()
    Image.new("RGB", (width, height), color=(0, 0, 0)).save(output, format="PNG")
    return output.getvalue()


def resumed_activity_dump(package: Optional[str], field: str = "topResumedActivity") -> str:
    if package is None:
        return "ACTIVITY MANAGER ACTIVITIES (dumpsys activity activities)\n  (nothing)\n"
    return (
        "ACTIVITY MANAGER ACTIVITIES (dumpsys activity activities)\n"
        "Display #0 (activities from top to bottom):\n"
        f"  {field}=ActivityRecord{{8c1f2a0 u0 {package}/.MainActivity t42}}\n"
    )


class FakeShellDevice:
    """
    In-memory stand-in for a device reached over `adb shell`.

    ``screens`` is the sequence of hierarchy dumps; ``uiautomator dump``
    writes the current one to the dump file that ``cat`` reads. Each
    ``input swipe`` advances to the next one (the last one repeats).
    ``dump_error`` makes the dump print an error and exit 0 without
    writing anything.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, ...]] = []
        self.screens: list[str] = [SAMPLE_HIERARCHY_XML]
        self.screen_index = 0
        self.dump_file: Optional[str] = None
        self.dump_error: Optional[str] = None
        self.current_package: Optional[str] = "com.android.launcher"
        self.activity_field = "topResumedActivity"
        self.launchable = True
        self.wm_size = "Physical size: 1080x2400\n"
        self.wm_density = "Physical density: 420\n"
        self.failing: set[str] = set()
        self.logcat = "01-01 00:00:00.000 I/Test: hello\n"
        self.screenshot = png_bytes()

    @property
    def inputs(self) -> list[tuple[str, ...]]:
        return [c for c in self.calls if c and c[0] == "input"]

    async def shell(self, *args: str, timeout: Optional[float] = None, check: bool = True) -> CommandResult:
        self.calls.append(args)
        command = args[0]

        if command in self.failing or " ".join(args[:2]) in self.failing:
            raise TransportError(f"adb shell {' '.join(args)} failed: error: device offline")

        if command == "rm":
            self.dump_file = None
            return CommandResult(stdout="")
        if command == "uiautomator":
            if self.dump_error is not None:
                return CommandResult(stdout=self.dump_error)
            index = min(self.screen_index, len(self.screens) - 1)
            self.dump_file = self.screens[index]
            return CommandResult(stdout=f"UI hierchary dumped to: {args[-1]}\n")
        if command == "cat":
            if self.dump_file is None:
                raise TransportError(f"adb shell cat failed: cat: {args[-1]}: No such file or directory")
            return CommandResult(stdout=self.dump_file)
        if command == "dumpsys":
            return CommandResult(stdout=resumed_activity_dump(self.current_package, self.activity_field))
        if command == "monkey":
            if self.launchable:
                self.current_package = args[2]
            return CommandResult(stdout="Events injected: 1\n")
        if command == "am" and args[1] == "force-stop":
            if self.current_package == args[2]:
                self.current_package = "com.android.launcher"
            return CommandResult(stdout="")
        if command == "wm":
            return CommandResult(stdout=self.wm_size if args[1] == "size" else self.wm_density)
        if command == "input":
            if args[1] == "swipe" and (args[2], args[3]) != (args[4], args[5]):
                self.screen_index += 1
            return CommandResult(stdout="")
        return CommandResult(stdout="")

    async def run(self, *args: str, timeout: Optional[float] = None, check: bool = True) -> CommandResult:
        if args and args[0] == "shell":
            return await self.shell(*args[1:], timeout=timeout, check=check)
        self.calls.append(args)
        if args[:2] == ("logcat", "-d"):
            return CommandResult(stdout=self.logcat)
        return CommandResult(stdout="")

    async def run_bytes(self, *args: str, timeout: Optional[float] = None) -> bytes:
        self.calls.append(args)
        if "screencap" in self.failing:
            raise TransportError("adb exec-out screencap -p failed: error: device offline")
        return self.screenshot


@pytest.fixture
def fast_settings() -> Settings:
    """Settings with near-zero delays so waits finish quickly."""
    settings = Settings()
    settings.automation = AutomationSettings(
        poll_interval=0.01,
        type_settle_delay=0.0,
        scroll_delay=0.0,
        clear_key_presses=5,
    )
    return settings


@pytest.fixture
def shell_device() -> FakeShellDevice:
    return FakeShellDevice()


@pytest.fixture
def mock_transport(shell_device: FakeShellDevice) -> MagicMock:
    """A spec'd ADBTransport whose commands are served by the fake device."""
    transport = MagicMock(spec=ADBTransport)
    transport.serial = "emulator-5554"
    transport.shell = AsyncMock(side_effect=shell_device.shell)
    transport.run = AsyncMock(side_effect=shell_device.run)
    transport.run_bytes = AsyncMock(side_effect=shell_device.run_bytes)
    return transport


@pytest.fixture
def adb_interactor(mock_transport: MagicMock, fast_settings: Settings) -> ADBDeviceInteractor:
    return ADBDeviceInteractor(transport=mock_transport, settings=fast_settings)


# ---------------------------------------------------------------------------
# uiautomator2 device mock
# ---------------------------------------------------------------------------


def make_ui_object(bounds: tuple[int, int, int, int] = (0, 0, 100, 100), exists: bool = True) -> MagicMock:
    """A mock uiautomator2 UiObject with the given visible bounds."""
    left, top, right, bottom = bounds
    obj = MagicMock()
    obj.exists = exists
    obj.info = {
        "bounds": {"left": left, "top": top, "right": right, "bottom": bottom},
        "visibleBounds": {"left": left, "top": top, "right": right, "bottom": bottom},
    }
    return obj


class FakeU2Device:
    """Registry of live elements keyed by the uiautomator2 selector kwargs."""

    def __init__(self) -> None:
        self.elements: dict[tuple[tuple[str, Any], ...], MagicMock] = {}
        self.mock = MagicMock()
        self.mock.serial = "emulator-5554"
        self.mock.window_size.return_value = (1080, 2400)
        self.mock.dump_hierarchy.return_value = SAMPLE_HIERARCHY_XML
        self.mock.app_current.return_value = {"package": "com.android.launcher", "activity": ".Launcher"}
        self.mock.screenshot.return_value = Image.new("RGB", (40, 80))
        self.mock.side_effect = self._select

    def add(self, element: MagicMock, **kwargs: Any) -> MagicMock:
        self.elements[tuple(sorted(kwargs.items()))] = element
        return element

    def _select(self, **kwargs: Any) -> MagicMock:
        return self.elements.get(tuple(sorted(kwargs.items())), make_ui_object(exists=False))


@pytest.fixture
def u2_device() -> FakeU2Device:
    return FakeU2Device()


@pytest.fixture
def direct_interactor(u2_device: FakeU2Device, fast_settings: Settings) -> DirectDeviceInteractor:
    transport = MagicMock(spec=ADBTransport)
    transport.run = AsyncMock(return_value=CommandResult(stdout="log line\n"))
    return DirectDeviceInteractor(u2_device.mock, transport=transport, settings=fast_settings)
