"""
Data Model
==========

Plain values shared by every backend.

This package contains:
    - selector: Declarative element selectors
    - screen_node: Bounds, NodeType and the immutable ScreenNode tree
    - results: InteractionResult variants, SwipeDirection, RecordedStep
"""

from automator.model.results import (
    Action,
    ElementNotFound,
    Error,
    InteractionResult,
    RecordedStep,
    Success,
    SwipeDirection,
)
from automator.model.screen_node import Bounds, NodeType, ScreenNode
from automator.model.selector import (
    ByClassName,
    ByDescription,
    ByResourceId,
    ByText,
    Selector,
    by_class,
    by_desc,
    by_id,
    by_text,
    selector_from_params,
)

__all__ = [
    "Action",
    "Bounds",
    "ByClassName",
    "ByDescription",
    "ByResourceId",
    "ByText",
    "ElementNotFound",
    "Error",
    "InteractionResult",
    "NodeType",
    "RecordedStep",
    "ScreenNode",
    "Selector",
    "Success",
    "SwipeDirection",
    "by_class",
    "by_desc",
    "by_id",
    "by_text",
    "selector_from_params",
]
