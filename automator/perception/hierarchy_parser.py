"""
Hierarchy Parser
================

Parse a uiautomator window dump into a ScreenNode tree.

The dump is an XML document of nested ``<node>`` elements, usually wrapped
in a ``<hierarchy>`` element:

    <hierarchy rotation="0">
      <node class="android.widget.FrameLayout" bounds="[0,0][1080,2400]" ...>
        <node class="android.widget.Button" text="OK" clickable="true" .../>
      </node>
    </hierarchy>

Usage:
    from automator.perception import parse_hierarchy

    root = parse_hierarchy(xml_text)
    print(root.pretty_print())
"""

import re
from typing import Optional
from xml.etree import ElementTree

from automator.errors import ParseError
from automator.model.screen_node import Bounds, NodeType, ScreenNode
from automator.utils.logger import get_logger

logger = get_logger(__name__)

_BOUNDS_RE = re.compile(r"^\[(\d+),(\d+)\]\[(\d+),(\d+)\]$")
_DOCUMENT_START_RE = re.compile(r"<\?xml|<hierarchy|<node")


def looks_like_hierarchy(text: str) -> bool:
    """Cheap check that shell output contains a hierarchy document at all."""
    return bool(text) and _DOCUMENT_START_RE.search(text) is not None


def parse_bounds(value: Optional[str]) -> Optional[Bounds]:
    """
    Parse ``[left,top][right,bottom]``.

    Returns:
        Bounds, or None for missing, malformed or inverted values.
    """
    if not value:
        return None
    match = _BOUNDS_RE.match(value.strip())
    if not match:
        return None
    left, top, right, bottom = (int(g) for g in match.groups())
    try:
        return Bounds(left, top, right, bottom)
    except ValueError:
        return None


class HierarchyParser:
    """
    Converts hierarchy XML into an immutable ScreenNode tree.

    Only ``node`` elements become ScreenNodes; any other element is a
    wrapper and neither appears in the tree nor counts towards depth.
    """

    def parse(self, markup: str) -> ScreenNode:
        """
        Parse a hierarchy dump.

        Args:
            markup: XML text. Leading shell noise before the document is ignored.

        Returns:
            The single top-level node, or a synthetic CONTAINER root when the
            document has zero or several top-level nodes.

        Raises:
            ParseError: If the markup cannot be tokenized as XML.
        """
        document = self._strip_noise(markup)
        if not document:
            raise ParseError("Empty hierarchy dump")

        try:
            root = ElementTree.fromstring(document)
        except ElementTree.ParseError as e:
            raise ParseError(f"Malformed hierarchy dump: {e}") from e

        if root.tag == "node":
            top_level = [self._parse_node(root, depth=0)]
        else:
            top_level = self._parse_children(root, depth=0)

        logger.debug("Parsed hierarchy", top_level=len(top_level))

        if len(top_level) == 1:
            return top_level[0]
        return ScreenNode.empty(children=tuple(top_level))

    def _strip_noise(self, markup: str) -> str:
        # `uiautomator dump` may print a status line before the document
        match = _DOCUMENT_START_RE.search(markup)
        if match is None:
            return markup.strip()
        return markup[match.start():].strip()

    def _parse_children(self, element: ElementTree.Element, depth: int) -> list[ScreenNode]:
        nodes: list[ScreenNode] = []
        for child in element:
            if child.tag == "node":
                nodes.append(self._parse_node(child, depth))
            else:
                # Wrapper: its nodes stay at the current depth
                nodes.extend(self._parse_children(child, depth))
        return nodes

    def _parse_node(self, element: ElementTree.Element, depth: int) -> ScreenNode:
        class_name = element.get("class") or ""
        clickable = element.get("clickable") == "true"
        scrollable = element.get("scrollable") == "true"

        return ScreenNode(
            class_name=class_name,
            node_type=NodeType.classify(class_name, clickable, scrollable),
            resource_id=_non_blank(element.get("resource-id")),
            text=_non_blank(element.get("text")),
            content_description=_non_blank(element.get("content-desc")),
            clickable=clickable,
            scrollable=scrollable,
            checkable=element.get("checkable") == "true",
            checked=element.get("checked") == "true",
            enabled=element.get("enabled") != "false",
            focusable=element.get("focusable") == "true",
            bounds=parse_bounds(element.get("bounds")),
            children=tuple(self._parse_children(element, depth + 1)),
            depth=depth,
        )


def _non_blank(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value


_default_parser = HierarchyParser()


def parse_hierarchy(markup: str) -> ScreenNode:
    """Parse a hierarchy dump with the shared parser. See ``HierarchyParser.parse``."""
    return _default_parser.parse(markup)
