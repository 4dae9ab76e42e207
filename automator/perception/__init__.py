"""
Perception Module
=================

UI state understanding for Android screens.

This package contains:
    - hierarchy_parser: uiautomator XML dump to ScreenNode tree
"""

from automator.perception.hierarchy_parser import (
    HierarchyParser,
    looks_like_hierarchy,
    parse_bounds,
    parse_hierarchy,
)

__all__ = [
    "HierarchyParser",
    "looks_like_hierarchy",
    "parse_bounds",
    "parse_hierarchy",
]
