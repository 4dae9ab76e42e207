"""
Tests for Model Types
=====================

Covers:
- Selectors: string forms, helpers, selector_from_params
- Bounds: center, size, validation
- NodeType.classify ordering
- ScreenNode: matching, flatten order, queries, to_selector, display_name, pretty_print
- Results: messages, SwipeDirection parsing, RecordedStep
"""

import pytest

from automator.model.results import (
    Action,
    ElementNotFound,
    Error,
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
    by_class,
    by_desc,
    by_id,
    by_text,
    selector_from_params,
)
from automator.errors import TransportError


def _node(**kwargs) -> ScreenNode:
    kwargs.setdefault("class_name", "android.view.View")
    return ScreenNode(**kwargs)


@pytest.fixture
def tree() -> ScreenNode:
    """root -> (a -> (a1, a2), b)"""
    a1 = _node(class_name="android.widget.TextView", text="First", depth=2)
    a2 = _node(class_name="android.widget.TextView", text="Second item", depth=2)
    a = _node(resource_id="com.app:id/a", children=(a1, a2), depth=1)
    b = _node(
        class_name="android.widget.Button",
        text="Submit",
        clickable=True,
        bounds=Bounds(0, 0, 100, 50),
        depth=1,
    )
    return _node(class_name="android.widget.FrameLayout", children=(a, b))


# ---------------------------------------------------------------------------
# Selectors
# ---------------------------------------------------------------------------


class TestSelectors:
    def test_string_forms(self):
        assert str(ByResourceId("login")) == "ByResourceId(login)"
        assert str(ByText("OK")) == "ByText(OK, exact=True)"
        assert str(ByText("ok", exact=False)) == "ByText(ok, exact=False)"
        assert str(ByClassName("android.widget.Button")) == "ByClassName(android.widget.Button)"
        assert str(ByDescription("Back")) == "ByDescription(Back)"

    def test_text_defaults_to_exact(self):
        assert ByText("OK").exact is True

    def test_helpers(self):
        assert by_id("x") == ByResourceId("x")
        assert by_text("y", exact=False) == ByText("y", False)
        assert by_desc("z") == ByDescription("z")
        assert by_class("w") == ByClassName("w")

    def test_selectors_are_hashable_values(self):
        assert {ByText("a"), ByText("a")} == {ByText("a")}

    @pytest.mark.parametrize(
        "selector_type,expected",
        [
            ("resource_id", ByResourceId("v")),
            ("text", ByText("v")),
            ("description", ByDescription("v")),
            ("class_name", ByClassName("v")),
            (" TEXT ", ByText("v")),
        ],
    )
    def test_selector_from_params(self, selector_type, expected):
        assert selector_from_params(selector_type, "v") == expected

    def test_selector_from_params_non_exact_text(self):
        assert selector_from_params("text", "v", exact=False) == ByText("v", exact=False)

    def test_selector_from_params_unknown_type(self):
        with pytest.raises(ValueError, match="Unknown selector type"):
            selector_from_params("xpath", "//node")

    def test_selector_from_params_empty_value(self):
        with pytest.raises(ValueError):
            selector_from_params("text", "")


# ---------------------------------------------------------------------------
# Bounds
# ---------------------------------------------------------------------------


class TestBounds:
    def test_center_and_size(self):
        bounds = Bounds(10, 20, 110, 70)
        assert bounds.center == (60, 45)
        assert bounds.width == 100
        assert bounds.height == 50

    def test_center_uses_floor_division(self):
        assert Bounds(0, 0, 5, 5).center == (2, 2)

    def test_zero_area_is_allowed(self):
        assert Bounds(5, 5, 5, 5).width == 0

    def test_str(self):
        assert str(Bounds(1, 2, 3, 4)) == "[1,2][3,4]"

    def test_inverted_rejected(self):
        with pytest.raises(ValueError):
            Bounds(100, 0, 10, 50)

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            Bounds(-1, 0, 10, 10)


# ---------------------------------------------------------------------------
# NodeType
# ---------------------------------------------------------------------------


class TestNodeType:
    @pytest.mark.parametrize(
        "class_name,clickable,scrollable,expected",
        [
            ("android.widget.Button", False, False, NodeType.BUTTON),
            ("android.widget.ImageButton", False, False, NodeType.BUTTON),
            ("android.widget.EditText", False, False, NodeType.TEXT_FIELD),
            ("android.widget.CheckBox", True, False, NodeType.CHECKBOX),
            ("android.widget.Switch", True, False, NodeType.SWITCH),
            ("android.widget.ToggleButton", True, False, NodeType.BUTTON),
            ("android.widget.ImageView", False, False, NodeType.IMAGE),
            ("android.widget.TextView", True, False, NodeType.TEXT),
            ("androidx.recyclerview.widget.RecyclerView", False, True, NodeType.SCROLLABLE),
            ("com.custom.Widget", True, False, NodeType.CLICKABLE),
            ("android.widget.LinearLayout", False, False, NodeType.CONTAINER),
            ("com.custom.Widget", False, False, NodeType.UNKNOWN),
            ("", False, False, NodeType.UNKNOWN),
        ],
    )
    def test_classify(self, class_name, clickable, scrollable, expected):
        assert NodeType.classify(class_name, clickable, scrollable) == expected

    def test_button_rule_wins_over_scrollable(self):
        assert NodeType.classify("ScrollButton", clickable=True, scrollable=True) == NodeType.BUTTON


# ---------------------------------------------------------------------------
# ScreenNode
# ---------------------------------------------------------------------------


class TestScreenNodeMatching:
    def test_resource_id_is_substring_match(self):
        node = _node(resource_id="com.app:id/login_button")
        assert node.matches(ByResourceId("login_button"))
        assert node.matches(ByResourceId("com.app:id/login"))
        assert not node.matches(ByResourceId("logout"))

    def test_exact_text(self):
        node = _node(text="Sign in")
        assert node.matches(ByText("Sign in"))
        assert not node.matches(ByText("sign in"))
        assert not node.matches(ByText("Sign"))

    def test_non_exact_text_is_case_insensitive_substring(self):
        node = _node(text="Sign in with Google")
        assert node.matches(ByText("GOOGLE", exact=False))
        assert not node.matches(ByText("Apple", exact=False))

    def test_class_name_and_description_are_exact(self):
        node = _node(class_name="android.widget.Button", content_description="Navigate up")
        assert node.matches(ByClassName("android.widget.Button"))
        assert not node.matches(ByClassName("Button"))
        assert node.matches(ByDescription("Navigate up"))
        assert not node.matches(ByDescription("Navigate"))

    def test_missing_attribute_never_matches(self):
        node = _node()
        assert not node.matches(ByResourceId(""))
        assert not node.matches(ByText("", exact=False))
        assert not node.matches(ByDescription(""))

    def test_unknown_selector_rejected(self):
        with pytest.raises(TypeError):
            _node().matches("text")


class TestScreenNodeTree:
    def test_flatten_is_pre_order(self, tree):
        names = [n.display_name for n in tree.flatten()]
        assert names == [
            "android.widget.FrameLayout",
            "com.app:id/a",
            "First",
            "Second item",
            "Submit",
        ]

    def test_flatten_includes_self_first(self, tree):
        assert tree.flatten()[0] is tree

    def test_first_returns_first_match_in_pre_order(self, tree):
        node = tree.first(ByClassName("android.widget.TextView"))
        assert node is not None
        assert node.text == "First"

    def test_first_none_when_absent(self, tree):
        assert tree.first(ByText("Missing")) is None

    def test_contains_selector_and_predicate(self, tree):
        assert tree.contains(ByText("item", exact=False))
        assert tree.contains(lambda n: n.clickable)
        assert not tree.contains(ByText("Nope"))

    def test_find_helpers(self, tree):
        assert [n.text for n in tree.find_by_text("Second", contains=True)] == ["Second item"]
        assert tree.find_by_text("second item") == []
        assert len(tree.find_by_resource_id("id/a")) == 1
        assert [n.text for n in tree.find_clickable()] == ["Submit"]
        assert tree.find_scrollable() == []

    def test_empty_root(self):
        root = ScreenNode.empty()
        assert root.class_name == "root"
        assert root.node_type == NodeType.CONTAINER
        assert root.enabled is True
        assert root.children == ()
        assert root.flatten() == [root]


class TestScreenNodeLabels:
    def test_display_name_priority(self):
        assert _node(text="T", content_description="D", resource_id="R").display_name == "T"
        assert _node(text="  ", content_description="D", resource_id="R").display_name == "D"
        assert _node(resource_id="R").display_name == "R"
        assert _node(class_name="android.widget.Button").display_name == "android.widget.Button"

    @pytest.mark.parametrize(
        "node,expected",
        [
            (_node(resource_id="com.app:id/ok", text="OK"), ByResourceId("com.app:id/ok")),
            (_node(text="OK", content_description="Confirm"), ByText("OK")),
            (_node(content_description="Confirm"), ByDescription("Confirm")),
            (_node(class_name="android.widget.Button"), ByClassName("android.widget.Button")),
        ],
    )
    def test_to_selector_priority(self, node, expected):
        assert node.to_selector() == expected

    def test_to_selector_matches_its_own_node(self, tree):
        for node in tree.flatten():
            assert node.matches(node.to_selector())

    def test_pretty_print(self, tree):
        output = tree.pretty_print()
        lines = output.splitlines()

        assert output.endswith("\n")
        assert lines[0] == "android.widget.FrameLayout"
        assert lines[1] == '  android.view.View | id="com.app:id/a"'
        assert lines[2] == '    android.widget.TextView | text="First"'
        assert lines[4] == '  android.widget.Button | text="Submit" | clickable | bounds=[0,0][100,50]'

    def test_pretty_print_base_indent(self):
        assert _node().pretty_print(indent=2) == "    android.view.View\n"


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class TestResults:
    def test_success(self):
        result = Success("Clicked: ByText(OK, exact=True)")
        assert result.is_success
        assert result.message == "Clicked: ByText(OK, exact=True)"

    def test_element_not_found_carries_selector(self):
        result = ElementNotFound(ByText("OK"))
        assert not result.is_success
        assert result.selector == ByText("OK")
        assert result.message == "Element not found: ByText(OK, exact=True)"

    def test_error_carries_cause(self):
        cause = TransportError("device offline")
        result = Error(cause)
        assert not result.is_success
        assert result.cause is cause
        assert result.message == "TransportError: device offline"

    @pytest.mark.parametrize("value", ["up", "UP", " Down ", SwipeDirection.LEFT])
    def test_direction_parse(self, value):
        assert isinstance(SwipeDirection.parse(value), SwipeDirection)

    def test_direction_parse_unknown(self):
        with pytest.raises(ValueError, match="Unknown direction"):
            SwipeDirection.parse("diagonal")


class TestRecordedStep:
    def test_from_result(self):
        step = RecordedStep.from_result(
            Action.CLICK,
            ElementNotFound(ByText("OK")),
            selector=ByText("OK"),
            elapsed_ms=42,
        )
        assert step.success is False
        assert step.elapsed_ms == 42
        assert step.params == {}

    def test_to_dict(self):
        step = RecordedStep(
            action=Action.TYPE_TEXT,
            selector=ByResourceId("email"),
            params={"text": "a@b.c"},
        )
        assert step.to_dict() == {
            "action": "type_text",
            "selector": "ByResourceId(email)",
            "params": {"text": "a@b.c"},
            "success": True,
            "elapsed_ms": 0,
        }

    def test_to_dict_without_selector(self):
        assert RecordedStep(action=Action.PRESS_BACK).to_dict()["selector"] is None
