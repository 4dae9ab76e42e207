"""
Configuration
=============

Settings for the adb transport, automation timing and logging.

Every field can be set from the environment (``ADB_DEVICE_SERIAL``,
``POLL_INTERVAL``, ``LOG_LEVEL``...) or from a ``.env`` file in the working
directory. Durations are in seconds unless the name says otherwise.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# All sections read the same environment and .env file
_shared_config = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    env_prefix="",
    extra="ignore",
)


class DeviceSettings(BaseSettings):
    """ADB transport configuration."""

    model_config = _shared_config

    adb_path: str = Field(
        default="",
        description="Path to the adb executable (leave empty to search PATH and ANDROID_HOME)",
    )
    adb_device_serial: str = Field(
        default="",
        description="Specific ADB device serial (leave empty for the default device)",
    )
    adb_command_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for a single adb command",
    )
    dump_path: str = Field(
        default="/sdcard/window_dump.xml",
        description="On-device path used for uiautomator hierarchy dumps",
    )


class AutomationSettings(BaseSettings):
    """Timing defaults for waits, scrolling and input emulation."""

    model_config = _shared_config

    poll_interval: float = Field(default=0.25, description="Seconds between condition checks")
    wait_timeout: float = Field(default=5.0, description="Default element wait in seconds")
    launch_timeout: float = Field(default=15.0, description="Default app launch wait in seconds")
    idle_timeout: float = Field(default=5.0, description="Default idle wait in seconds")
    scroll_max: int = Field(default=5, description="Default maximum swipes for scroll_until_found")
    scroll_delay: float = Field(default=0.5, description="Seconds to settle after each scroll")
    long_click_ms: int = Field(default=750, description="Hold duration for emulated long clicks")
    type_settle_delay: float = Field(
        default=0.2,
        description="Seconds to wait after focusing a field before typing",
    )
    clear_key_presses: int = Field(
        default=50,
        description="Delete key presses sent to clear a text field over the shell",
    )
    run_timeout: float = Field(default=120.0, description="Outer timeout for a whole automation run")

    @field_validator(
        "poll_interval",
        "wait_timeout",
        "launch_timeout",
        "idle_timeout",
        "scroll_delay",
        "type_settle_delay",
        "run_timeout",
    )
    @classmethod
    def non_negative(cls, v: float) -> float:
        """Durations must not be negative."""
        if v < 0:
            raise ValueError("duration must be non-negative")
        return v

    @field_validator("long_click_ms", "clear_key_presses", "scroll_max")
    @classmethod
    def non_negative_count(cls, v: int) -> int:
        """Counts and hold times must not be negative."""
        if v < 0:
            raise ValueError("value must be non-negative")
        return v


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = _shared_config

    debug: bool = Field(default=True, description="Colored console output instead of JSON")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Log level",
    )


class Settings(BaseSettings):
    """
    All configuration sections.

    Usage:
        from automator.config import get_settings
        settings = get_settings()
        print(settings.device.adb_device_serial)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Nested settings
    device: DeviceSettings = Field(default_factory=DeviceSettings)
    automation: AutomationSettings = Field(default_factory=AutomationSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    def __init__(self, **kwargs):
        """Initialize settings with nested configuration."""
        super().__init__(**kwargs)
        # Re-initialize nested settings to pick up env vars
        self.device = DeviceSettings()
        self.automation = AutomationSettings()
        self.logging = LoggingSettings()


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings, loaded once from the environment."""
    return Settings()
