"""
Screen Snapshot Tree
====================

Immutable representation of one captured UI hierarchy.

Every ``dump_screen`` call builds a fresh tree; nodes are never mutated or
shared between snapshots. Queries walk the tree in pre-order, which is also
the order selector resolution uses ("first match wins").

Usage:
    screen = await interactor.dump_screen()
    buttons = screen.find_by_type(NodeType.BUTTON)
    if screen.contains(ByText("Continue")):
        ...
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Union

from automator.model.selector import (
    ByClassName,
    ByDescription,
    ByResourceId,
    ByText,
    Selector,
)


@dataclass(frozen=True)
class Bounds:
    """Device-pixel rectangle ``[left,top][right,bottom]``."""

    left: int
    top: int
    right: int
    bottom: int

    def __post_init__(self) -> None:
        if min(self.left, self.top, self.right, self.bottom) < 0:
            raise ValueError(f"Bounds must be non-negative: {self}")
        if self.right < self.left or self.bottom < self.top:
            raise ValueError(f"Bounds are inverted: {self}")

    @property
    def center_x(self) -> int:
        return (self.left + self.right) // 2

    @property
    def center_y(self) -> int:
        return (self.top + self.bottom) // 2

    @property
    def center(self) -> tuple[int, int]:
        return self.center_x, self.center_y

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

    def __str__(self) -> str:
        return f"[{self.left},{self.top}][{self.right},{self.bottom}]"


class NodeType(Enum):
    """Coarse classification of a node, derived from its class name and flags."""

    BUTTON = "button"
    TEXT = "text"
    TEXT_FIELD = "text_field"
    IMAGE = "image"
    CHECKBOX = "checkbox"
    SWITCH = "switch"
    SCROLLABLE = "scrollable"
    CLICKABLE = "clickable"
    CONTAINER = "container"
    UNKNOWN = "unknown"

    @classmethod
    def classify(cls, class_name: str, clickable: bool, scrollable: bool) -> "NodeType":
        """
        Derive the node type. Rules are checked in order; the first match wins.

        Args:
            class_name: Widget class, e.g. ``android.widget.Button``.
            clickable: The node's clickable flag.
            scrollable: The node's scrollable flag.
        """
        lower = class_name.lower()

        if "button" in lower:
            return cls.BUTTON
        elif lower.endswith("edittext") or lower.endswith("textfield"):
            return cls.TEXT_FIELD
        elif "checkbox" in lower:
            return cls.CHECKBOX
        elif "switch" in lower or "toggle" in lower:
            return cls.SWITCH
        elif "image" in lower:
            return cls.IMAGE
        elif lower.endswith("textview"):
            return cls.TEXT
        elif scrollable:
            return cls.SCROLLABLE
        elif clickable:
            return cls.CLICKABLE
        elif any(word in lower for word in ("layout", "view", "frame", "group")):
            return cls.CONTAINER
        return cls.UNKNOWN


@dataclass(frozen=True)
class ScreenNode:
    """
    One node of a UI snapshot.

    Attributes:
        class_name: Widget class name (may be empty).
        node_type: Classification derived from class name and flags.
        resource_id: Android resource id, or None when absent/blank.
        text: Visible text, or None when absent/blank.
        content_description: Accessibility description, or None.
        clickable: Whether the node accepts clicks.
        scrollable: Whether the node scrolls.
        checkable: Whether the node is a checkbox/switch-like control.
        checked: Whether the node is currently checked.
        enabled: Whether the node is enabled.
        focusable: Whether the node can take focus.
        bounds: On-screen rectangle, or None when unknown.
        children: Child nodes in document order.
        depth: Distance from the snapshot root (root is 0).
    """

    class_name: str
    node_type: NodeType = NodeType.UNKNOWN
    resource_id: Optional[str] = None
    text: Optional[str] = None
    content_description: Optional[str] = None
    clickable: bool = False
    scrollable: bool = False
    checkable: bool = False
    checked: bool = False
    enabled: bool = True
    focusable: bool = False
    bounds: Optional[Bounds] = None
    children: tuple["ScreenNode", ...] = ()
    depth: int = 0

    @classmethod
    def empty(cls, children: tuple["ScreenNode", ...] = ()) -> "ScreenNode":
        """The synthetic container root used for empty or multi-root dumps."""
        return cls(
            class_name="root",
            node_type=NodeType.CONTAINER,
            enabled=True,
            children=children,
            depth=0,
        )

    @property
    def display_name(self) -> str:
        """Best human-readable label for diagnostics. Never used for matching."""
        for value in (self.text, self.content_description, self.resource_id):
            if value and value.strip():
                return value
        return self.class_name

    # Tree

    def flatten(self) -> list["ScreenNode"]:
        """This node and all descendants in pre-order."""
        nodes: list[ScreenNode] = []
        stack: list[ScreenNode] = [self]
        while stack:
            node = stack.pop()
            nodes.append(node)
            stack.extend(reversed(node.children))
        return nodes

    def pretty_print(self, indent: int = 0) -> str:
        """Indented one-line-per-node rendering of the subtree."""
        lines: list[str] = []
        self._render(indent, lines)
        return "\n".join(lines) + "\n"

    def _render(self, indent: int, lines: list[str]) -> None:
        info = [self.class_name]
        if self.text and self.text.strip():
            info.append(f'text="{self.text}"')
        if self.content_description and self.content_description.strip():
            info.append(f'desc="{self.content_description}"')
        if self.resource_id and self.resource_id.strip():
            info.append(f'id="{self.resource_id}"')
        if self.clickable:
            info.append("clickable")
        if self.scrollable:
            info.append("scrollable")
        if self.checkable:
            info.append("checkable")
        if self.checked:
            info.append("checked")
        if self.bounds is not None:
            info.append(f"bounds={self.bounds}")

        lines.append("  " * indent + " | ".join(info))
        for child in self.children:
            child._render(indent + 1, lines)

    # Finding

    def find(self, predicate: Callable[["ScreenNode"], bool]) -> list["ScreenNode"]:
        return [node for node in self.flatten() if predicate(node)]

    def find_by_resource_id(self, resource_id: str) -> list["ScreenNode"]:
        return self.find(lambda n: n.resource_id is not None and resource_id in n.resource_id)

    def find_by_text(self, text: str, contains: bool = False) -> list["ScreenNode"]:
        return self.find(lambda n: _text_matches(n.text, text, exact=not contains))

    def find_by_description(self, description: str, contains: bool = False) -> list["ScreenNode"]:
        return self.find(
            lambda n: _text_matches(n.content_description, description, exact=not contains)
        )

    def find_by_type(self, node_type: NodeType) -> list["ScreenNode"]:
        return self.find(lambda n: n.node_type == node_type)

    def find_clickable(self) -> list["ScreenNode"]:
        return self.find(lambda n: n.clickable)

    def find_scrollable(self) -> list["ScreenNode"]:
        return self.find(lambda n: n.scrollable)

    def first(self, selector: Selector) -> Optional["ScreenNode"]:
        """First node in pre-order matching the selector, or None."""
        for node in self.flatten():
            if node.matches(selector):
                return node
        return None

    # Selector support

    def contains(
        self, selector: Union[Selector, Callable[["ScreenNode"], bool]]
    ) -> bool:
        """True if any node in the subtree matches the selector or predicate."""
        if callable(selector):
            return any(selector(node) for node in self.flatten())
        return any(node.matches(selector) for node in self.flatten())

    def matches(self, selector: Selector) -> bool:
        """Match this single node. Missing attributes are a non-match."""
        if isinstance(selector, ByResourceId):
            return self.resource_id is not None and selector.id in self.resource_id
        if isinstance(selector, ByText):
            return _text_matches(self.text, selector.text, selector.exact)
        if isinstance(selector, ByClassName):
            return self.class_name == selector.class_name
        if isinstance(selector, ByDescription):
            return self.content_description == selector.description
        raise TypeError(f"Unsupported selector: {selector!r}")

    def to_selector(self) -> Selector:
        """Most specific selector for this node: id, then text, then description, then class."""
        if self.resource_id and self.resource_id.strip():
            return ByResourceId(self.resource_id)
        if self.text and self.text.strip():
            return ByText(self.text)
        if self.content_description and self.content_description.strip():
            return ByDescription(self.content_description)
        return ByClassName(self.class_name)


def _text_matches(value: Optional[str], wanted: str, exact: bool) -> bool:
    if value is None:
        return False
    if exact:
        return value == wanted
    return wanted.lower() in value.lower()
