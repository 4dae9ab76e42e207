"""
Android Device Automator
========================

Drive an Android device (tap, type, swipe, navigate) and read its UI state
from the uiautomator hierarchy dump.

Modules:
    - model: Selectors, the screen snapshot tree and interaction results
    - perception: Parsing of uiautomator hierarchy dumps
    - core: Deadline-bounded polling
    - device: Interactor contract plus the ADB shell and uiautomator2 backends
    - runner: Top-level automation run wrapper with failure diagnostics
    - utils: Structured logging
"""

__version__ = "1.0.0"
__author__ = "Android Device Automator Team"
