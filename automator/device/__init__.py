"""
Device Integration Module
=========================

Backends implementing the DeviceInteractor contract.

This package contains:
    - interactor: Abstract DeviceInteractor contract
    - transport: ADB command/response channel
    - adb_device: Backend driven purely through adb shell commands
    - direct_device: Backend driven through a live uiautomator2 handle
    - logcat: Device log capture and streaming
    - screenshot: Screenshot data and debugging helpers
"""

from automator.device.adb_device import ADBDeviceInteractor, DeviceInfo
from automator.device.direct_device import DirectDeviceInteractor
from automator.device.interactor import DeviceInteractor
from automator.device.logcat import LogcatCapture
from automator.device.screenshot import Screenshot
from automator.device.transport import ADBTransport, CommandResult

__all__ = [
    "ADBDeviceInteractor",
    "ADBTransport",
    "CommandResult",
    "DeviceInfo",
    "DeviceInteractor",
    "DirectDeviceInteractor",
    "LogcatCapture",
    "Screenshot",
]
