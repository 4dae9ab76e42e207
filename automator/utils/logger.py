"""
Structured Logging
==================

structlog configuration for the automator.

Log lines go to stderr so that stdout stays free for screen dumps and logcat
output. Every logger carries a ``module`` field (``device.adb_device``,
``perception.hierarchy_parser``...) and whatever device context is bound
with ``LogContext``.

Usage:
    from automator.utils.logger import get_logger

    logger = get_logger(__name__)
    logger.debug("Tap performed", x=540, y=840)
"""

import logging
import sys
from typing import Any, Optional, TextIO

import structlog
from structlog.types import EventDict, Processor

from automator import __version__
from automator.config import LoggingSettings, get_settings

# Third-party loggers that are chatty at INFO when driving a device
_NOISY_LOGGERS = ("uiautomator2", "urllib3", "adbutils", "PIL")


def add_automator_version(
    logger: Any,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Stamp the package version on machine-readable entries."""
    event_dict.setdefault("automator", __version__)
    return event_dict


def setup_logging(
    settings: Optional[LoggingSettings] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Configure structlog and the stdlib root logger.

    Debug mode renders colored key/value lines; otherwise each entry is one
    JSON object. Call once per process (the CLI and ``runner.run`` do it).

    Args:
        settings: Logging settings (defaults to the cached global settings).
        stream: Where log lines are written (defaults to stderr).
    """
    settings = settings or get_settings().logging
    stream = stream or sys.stderr
    level = getattr(logging, settings.log_level)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso" if not settings.debug else "%H:%M:%S"),
    ]

    if settings.debug:
        processors.append(structlog.dev.ConsoleRenderer(colors=stream.isatty()))
    else:
        processors += [
            add_automator_version,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(name)s: %(message)s", stream=stream, level=level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Logger bound to a short module name.

    Args:
        name: Usually ``__name__``; the ``automator.`` prefix is dropped.
    """
    module = name[len("automator."):] if name.startswith("automator.") else name
    return structlog.get_logger(module=module)


class LogContext:
    """
    Bind fields to every log line emitted inside the block.

    Nested contexts restore the outer values on exit.

    Usage:
        with LogContext(serial="emulator-5554"):
            await device.click(ByText("OK"))  # entries include serial=...
    """

    def __init__(self, **kwargs: Any) -> None:
        self.context = kwargs
        self._tokens: dict[str, Any] = {}

    def __enter__(self) -> "LogContext":
        self._tokens = structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, *args: Any) -> None:
        structlog.contextvars.reset_contextvars(**self._tokens)
