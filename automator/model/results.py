"""
Interaction Results
===================

Outcome vocabulary shared by every backend.

Selector-based interactions never raise for "nothing matched": they return
``ElementNotFound``. Callers branch on the variant, never on message text.

Usage:
    result = await interactor.click(ByText("OK"))
    if isinstance(result, ElementNotFound):
        await interactor.scroll_until_found(result.selector)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from automator.model.selector import Selector


@dataclass(frozen=True)
class Success:
    """The interaction was performed."""

    message: str = ""

    @property
    def is_success(self) -> bool:
        return True


@dataclass(frozen=True)
class ElementNotFound:
    """The selector matched nothing on the current screen."""

    selector: Selector

    @property
    def is_success(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return f"Element not found: {self.selector}"


@dataclass(frozen=True)
class Error:
    """The transport or live handle failed while acting."""

    cause: BaseException

    @property
    def is_success(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return f"{type(self.cause).__name__}: {self.cause}"


InteractionResult = Union[Success, ElementNotFound, Error]


class SwipeDirection(str, Enum):
    """Direction of the finger movement for a swipe."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @classmethod
    def parse(cls, value: Union[str, "SwipeDirection"]) -> "SwipeDirection":
        """Accept an enum member or a case-insensitive name."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError as e:
            raise ValueError(f"Unknown direction: {value}") from e


class Action(str, Enum):
    """Action tags used by recorded steps."""

    LAUNCH_APP = "launch_app"
    STOP_APP = "stop_app"
    CLICK = "click"
    LONG_CLICK = "long_click"
    TYPE_TEXT = "type_text"
    CLEAR_AND_TYPE = "clear_and_type"
    CLICK_AT = "click_at"
    SWIPE = "swipe"
    SCROLL_UNTIL_FOUND = "scroll_until_found"
    WAIT_FOR = "wait_for"
    PRESS_BACK = "press_back"
    PRESS_HOME = "press_home"
    PRESS_RECENT_APPS = "press_recent_apps"
    PRESS_KEY = "press_key"
    INPUT_TEXT = "input_text"


@dataclass
class RecordedStep:
    """
    One executed action, for replay and logging consumers.

    Attributes:
        action: What was done.
        selector: Target element, if the action had one.
        params: Extra string parameters (text, direction, timeout...).
        success: Whether the action succeeded.
        elapsed_ms: Wall time spent on the action.
    """

    action: Action
    selector: Optional[Selector] = None
    params: dict[str, str] = field(default_factory=dict)
    success: bool = True
    elapsed_ms: int = 0

    @classmethod
    def from_result(
        cls,
        action: Action,
        result: InteractionResult,
        selector: Optional[Selector] = None,
        params: Optional[dict[str, str]] = None,
        elapsed_ms: int = 0,
    ) -> "RecordedStep":
        return cls(
            action=action,
            selector=selector,
            params=dict(params or {}),
            success=result.is_success,
            elapsed_ms=elapsed_ms,
        )

    def to_dict(self) -> dict[str, Any]:
        """Flat dictionary suitable for structured log fields or JSON."""
        return {
            "action": self.action.value,
            "selector": str(self.selector) if self.selector is not None else None,
            "params": dict(self.params),
            "success": self.success,
            "elapsed_ms": self.elapsed_ms,
        }
