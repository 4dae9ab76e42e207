"""
Test Package
============

Unit tests for the Android device automator. No device is needed:
transports and uiautomator2 handles are mocked.

Test organization:
    - test_model.py: Selectors, bounds, node types, tree queries, results
    - test_parser.py: Hierarchy dump parsing
    - test_polling.py: Deadline-bounded waits
    - test_transport.py: adb command execution and error mapping
    - test_adb_device.py: adb shell backend
    - test_direct_device.py: uiautomator2 backend
    - test_logcat_screenshot.py: Log capture and screenshot helpers
    - test_runner.py: Failure diagnostics runner and CLI
    - test_config.py: Settings loading
    - test_logger.py: structlog configuration and LogContext

Run tests with:
    pytest tests/ -v
"""
