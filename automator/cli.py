"""
Command Line Interface
======================

Inspect a connected device from the terminal.

Usage:
    automator dump                 # print the current screen tree
    automator dump --direct        # same, through uiautomator2
    automator info                 # display size, density, foreground app
    automator logcat -n 200        # last 200 log lines
    automator wait --text "OK" --timeout 10
"""

import argparse
import asyncio
import sys
from typing import Optional

from automator.device.adb_device import ADBDeviceInteractor
from automator.device.direct_device import DirectDeviceInteractor
from automator.device.interactor import DeviceInteractor
from automator.model.selector import SELECTOR_TYPES, Selector, selector_from_params
from automator.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="automator",
        description="Inspect and drive an Android device over adb",
    )
    parser.add_argument("--serial", "-s", help="Device serial (default: ADB_DEVICE_SERIAL or first device)")
    parser.add_argument("--adb-path", help="Path to the adb executable")
    parser.add_argument(
        "--direct",
        action="store_true",
        help="Use a live uiautomator2 connection instead of adb shell dumps",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("dump", help="Print the current screen tree")
    commands.add_parser("info", help="Print display size, density and foreground package")

    logcat = commands.add_parser("logcat", help="Print recent log lines")
    logcat.add_argument("-n", "--lines", type=int, default=500, help="Number of lines")

    wait = commands.add_parser("wait", help="Wait for an element to appear")
    group = wait.add_mutually_exclusive_group(required=True)
    group.add_argument("--resource-id")
    group.add_argument("--text")
    group.add_argument("--description")
    group.add_argument("--class-name")
    wait.add_argument("--contains", action="store_true", help="Substring text match")
    wait.add_argument("--timeout", type=float, default=5.0, help="Seconds to wait")

    return parser


async def _open(args: argparse.Namespace) -> DeviceInteractor:
    if args.direct:
        return await DirectDeviceInteractor.connect(args.serial)
    return ADBDeviceInteractor(adb_path=args.adb_path, serial=args.serial)


async def _run(args: argparse.Namespace) -> int:
    interactor = await _open(args)

    if args.command == "dump":
        await interactor.print_screen()
        return 0

    if args.command == "info":
        adb = interactor if isinstance(interactor, ADBDeviceInteractor) else ADBDeviceInteractor(
            adb_path=args.adb_path, serial=args.serial
        )
        info = await adb.device_info()
        print(f"Display: {info.display_width}x{info.display_height}")
        print(f"Density: {info.density}dpi")
        print(f"Current package: {info.current_package or 'unknown'}")
        return 0

    if args.command == "logcat":
        print(await interactor.logcat_dump(args.lines), end="")
        return 0

    if args.command == "wait":
        selector = args.selector
        found = await interactor.wait_for(selector, timeout=args.timeout)
        print(f"Found: {selector}" if found else f"Timeout waiting for: {selector}")
        return 0 if found else 1

    return 2


def _wait_selector(args: argparse.Namespace) -> Selector:
    """The selector named by whichever of the mutually exclusive options was given."""
    for selector_type in SELECTOR_TYPES:
        value = getattr(args, selector_type)
        if value is not None:
            return selector_from_params(selector_type, value, exact=not args.contains)
    raise ValueError("No selector given")


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "wait":
        try:
            args.selector = _wait_selector(args)
        except ValueError as e:
            parser.error(str(e))
    setup_logging()

    try:
        return asyncio.run(_run(args))
    except KeyboardInterrupt:
        return 130
    except Exception as e:
        logger.error("Command failed", command=args.command, error=str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
