"""
Element Selectors
=================

Declarative criteria for locating a UI element by one identity attribute.

A selector is one of four frozen variants. Matching against a node lives in
``ScreenNode.matches`` for snapshots and in each backend for live lookups.

Usage:
    from automator.model import ByResourceId, ByText, by_text

    login = ByResourceId("login_button")
    ok = by_text("OK")
    partial = ByText("sign", exact=False)
"""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class ByResourceId:
    """Substring match against the node's resource id."""

    id: str

    def __str__(self) -> str:
        return f"ByResourceId({self.id})"


@dataclass(frozen=True)
class ByText:
    """Exact, or case-insensitive substring, match against visible text."""

    text: str
    exact: bool = True

    def __str__(self) -> str:
        return f"ByText({self.text}, exact={self.exact})"


@dataclass(frozen=True)
class ByClassName:
    """Exact match against the node's widget class."""

    class_name: str

    def __str__(self) -> str:
        return f"ByClassName({self.class_name})"


@dataclass(frozen=True)
class ByDescription:
    """Exact match against the accessibility content description."""

    description: str

    def __str__(self) -> str:
        return f"ByDescription({self.description})"


Selector = Union[ByResourceId, ByText, ByClassName, ByDescription]

SELECTOR_TYPES = ("resource_id", "text", "description", "class_name")


def by_id(resource_id: str) -> ByResourceId:
    return ByResourceId(resource_id)


def by_text(text: str, exact: bool = True) -> ByText:
    return ByText(text, exact)


def by_desc(description: str) -> ByDescription:
    return ByDescription(description)


def by_class(class_name: str) -> ByClassName:
    return ByClassName(class_name)


def selector_from_params(selector_type: str, value: str, exact: bool = True) -> Selector:
    """
    Build a selector from the flat parameter schema used by tool callers.

    Args:
        selector_type: One of ``resource_id``, ``text``, ``description``, ``class_name``.
        value: The attribute value to match.
        exact: Exact text matching (only used for ``text``).

    Returns:
        The matching Selector variant.

    Raises:
        ValueError: If the type is unknown or the value is empty.
    """
    if not value:
        raise ValueError("Selector value must not be empty")

    selector_type = selector_type.strip().lower()
    if selector_type == "resource_id":
        return ByResourceId(value)
    elif selector_type == "text":
        return ByText(value, exact)
    elif selector_type == "description":
        return ByDescription(value)
    elif selector_type == "class_name":
        return ByClassName(value)
    raise ValueError(
        f"Unknown selector type: {selector_type}. "
        f"Use one of: {', '.join(SELECTOR_TYPES)}"
    )
