"""Tests for command validation and enrichment."""

import pytest

from canvas_intent.engine.config import EngineConfig
from canvas_intent.engine.validation.command_validator import (
    canonical_color,
    categorize,
    feedback,
    infer_fallback_kind,
    validate_command,
)
from canvas_intent.models.intent import Action, CommandCategory, CommandIntent
from tests.conftest import BLUE_RECT, GREEN_CIRCLE, HELLO_TEXT, RED_RECT


def _validate(action, snapshot=None, **params):
    intent = CommandIntent(action=action, params=params)
    return validate_command(intent, snapshot or [])


class TestCategories:
    @pytest.mark.parametrize("action, category", [
        (Action.CREATE, CommandCategory.CREATION),
        (Action.CREATE_COMPOSITE, CommandCategory.CREATION),
        (Action.MOVE, CommandCategory.MANIPULATION),
        (Action.DELETE, CommandCategory.MANIPULATION),
        (Action.ARRANGE, CommandCategory.LAYOUT),
        (Action.CREATE_MANY, CommandCategory.LAYOUT),
        (Action.LIST, CommandCategory.QUERY),
    ])
    def test_categorize(self, action, category):
        assert categorize(action) == category
        assert categorize(action.value) == category

    def test_canonical_color(self):
        assert canonical_color("Blue") == "#3B82F6"
        assert canonical_color("crimson") == "#EF4444"
        assert canonical_color("#abc") == "#AABBCC"
        assert canonical_color("nope") is None
        assert canonical_color(None) is None


class TestCreate:
    def test_defaults_center_a_rectangle(self):
        result = _validate(Action.CREATE)
        assert result.is_valid
        p = result.enhanced_params
        assert p["kind"] == "rectangle"
        assert (p["width"], p["height"]) == (100, 100)
        assert (p["x"], p["y"]) == (350, 250)
        assert p["fill"] == "#3B82F6"
        assert result.reasoning

    def test_circle_with_radius_and_color(self):
        result = _validate(Action.CREATE, shape_type="circle", radius=40, color="red")
        p = result.enhanced_params
        assert p["kind"] == "ellipse"
        assert p["shape_type"] == "circle"
        assert (p["width"], p["height"]) == (80, 80)
        assert p["fill"] == "#EF4444"
        assert "color" not in p
        assert (p["x"], p["y"]) == (360, 260)

    def test_position_word(self):
        result = _validate(Action.CREATE, shape_type="square", position="top left")
        assert (result.enhanced_params["x"], result.enhanced_params["y"]) == (150, 100)

    def test_explicit_coordinates_kept(self):
        result = _validate(Action.CREATE, x=16, y=32)
        assert (result.enhanced_params["x"], result.enhanced_params["y"]) == (16, 32)

    def test_text_gets_placeholder(self):
        result = _validate(Action.CREATE, shape_type="text")
        assert result.enhanced_params["text"] == "Text"

    def test_unknown_color_warns_and_uses_default(self):
        result = _validate(Action.CREATE, shape_type="circle", color="sparkly")
        assert result.is_valid
        assert result.warnings
        assert result.enhanced_params["fill"] == "#10B981"

    def test_unknown_shape_rejected(self):
        result = _validate(Action.CREATE, shape_type="hexagon")
        assert not result.is_valid
        assert "hexagon" in result.errors[0]
        assert 0 < len(result.suggestions) <= 3


class TestManipulation:
    def test_found_target(self):
        result = _validate(Action.MOVE, [RED_RECT, BLUE_RECT], description="the blue rectangle", x=200)
        assert result.is_valid
        assert result.enhanced_params["shape_id"] == "rect-2"
        # y keeps the current value when only x is given
        assert (result.enhanced_params["x"], result.enhanced_params["y"]) == (200, 96)

    def test_move_without_coordinates_centers(self):
        result = _validate(Action.MOVE, [RED_RECT], shape_id="rect-1")
        assert (result.enhanced_params["x"], result.enhanced_params["y"]) == (350, 250)

    def test_snapshot_is_not_mutated(self):
        snapshot = [RED_RECT.model_copy(), BLUE_RECT.model_copy()]
        before = [o.model_dump() for o in snapshot]
        _validate(Action.RECOLOR, snapshot, description="blue rectangle", color="green")
        assert [o.model_dump() for o in snapshot] == before

    def test_recolor_resolves_hex(self):
        result = _validate(Action.RECOLOR, [RED_RECT, BLUE_RECT], description="red box", color="green")
        assert result.enhanced_params["shape_id"] == "rect-1"
        assert result.enhanced_params["color"] == "#10B981"

    def test_missing_target_plans_create_first(self):
        result = _validate(Action.RECOLOR, [RED_RECT, BLUE_RECT], description="purple circle", color="blue")
        assert result.is_valid
        p = result.enhanced_params
        assert p["create_first"] is True
        assert p["shape_type"] == "circle"
        assert p["create_attributes"]["fill"] == "#8B5CF6"
        assert (p["create_attributes"]["x"], p["create_attributes"]["y"]) == (350, 250)
        assert any("will create circle first" in w for w in result.warnings)
        assert "shape_id" not in p

    def test_empty_canvas_retext_creates_text(self):
        intent = CommandIntent(action=Action.RETEXT, params={"text": "Hi"}, text="change it to Hi")
        result = validate_command(intent, [])
        assert result.is_valid
        assert result.enhanced_params["create_first"] is True
        assert result.enhanced_params["shape_type"] == "text"

    def test_delete_missing_rejects_with_suggestions(self):
        result = _validate(Action.DELETE, [RED_RECT, BLUE_RECT, GREEN_CIRCLE], description="purple rectangle")
        assert not result.is_valid
        assert result.not_found
        assert result.suggestions == ["red rectangle (rect-1)", "blue rectangle (rect-2)"]
        assert "create_first" not in result.enhanced_params

    def test_delete_on_empty_canvas(self):
        result = _validate(Action.DELETE, [], description="the square")
        assert not result.is_valid
        assert result.not_found
        assert result.errors == ["No shapes found on canvas"]

    def test_recolor_needs_a_color(self):
        result = _validate(Action.RECOLOR, [RED_RECT], shape_id="rect-1", color="sparkly")
        assert not result.is_valid

    def test_rotate_needs_an_angle(self):
        assert not _validate(Action.ROTATE, [RED_RECT], shape_id="rect-1").is_valid
        result = _validate(Action.ROTATE, [RED_RECT], shape_id="rect-1", angle=45)
        assert result.enhanced_params["degrees"] == 45

    def test_resize_rejects_non_positive_scale(self):
        assert not _validate(Action.RESIZE, [RED_RECT], shape_id="rect-1", scale=0).is_valid
        assert not _validate(Action.RESIZE, [RED_RECT], shape_id="rect-1").is_valid

    def test_resize_radius_becomes_extent(self):
        result = _validate(Action.RESIZE, [GREEN_CIRCLE], description="green circle", radius=60)
        assert (result.enhanced_params["width"], result.enhanced_params["height"]) == (120, 120)

    def test_retext_finds_text(self):
        result = _validate(Action.RETEXT, [RED_RECT, HELLO_TEXT], description='the "hello" text', text="Bye")
        assert result.enhanced_params["shape_id"] == "text-1"


class TestFallbackKind:
    def test_reference_kind_wins(self):
        assert infer_fallback_kind(Action.MOVE, "the blue triangle") == "triangle"

    def test_command_text_keyword(self):
        assert infer_fallback_kind(Action.MOVE, "the thing", "make the box bigger") == "rectangle"
        assert infer_fallback_kind(Action.MOVE, "the thing", "put the label here") == "text"

    def test_action_default(self):
        assert infer_fallback_kind(Action.RESIZE, "it") == "rectangle"
        assert infer_fallback_kind(Action.RETEXT, "") == "text"

    def test_delete_never_falls_back(self):
        assert infer_fallback_kind(Action.DELETE, "the red circle") is None


class TestLayout:
    def test_empty_canvas_rejected(self):
        result = _validate(Action.ARRANGE)
        assert not result.is_valid
        assert "No shapes found" in result.errors[0]

    def test_defaults_to_all_shapes_in_a_grid(self):
        result = _validate(Action.ARRANGE, [RED_RECT, BLUE_RECT, GREEN_CIRCLE])
        p = result.enhanced_params
        assert p["shape_ids"] == ["rect-1", "rect-2", "circle-1"]
        assert p["arrangement"] == "grid"
        assert p["columns"] == 2
        assert p["spacing"] == 16

    def test_missing_targets_dropped_with_warning(self):
        result = _validate(Action.ARRANGE, [RED_RECT, BLUE_RECT], shape_ids=["rect-1", "purple triangle"])
        assert result.is_valid
        assert result.enhanced_params["shape_ids"] == ["rect-1"]
        assert any("purple triangle" in w for w in result.warnings)

    def test_duplicate_targets_collapse(self):
        result = _validate(Action.ARRANGE, [RED_RECT, BLUE_RECT], shape_ids=["rect-1", "red rectangle"])
        assert result.enhanced_params["shape_ids"] == ["rect-1"]

    def test_unknown_arrangement(self):
        result = _validate(Action.ARRANGE, [RED_RECT], arrangement="spiral")
        assert not result.is_valid
        assert result.suggestions == ["grid", "row", "column"]

    def test_arrangement_synonym(self):
        result = _validate(Action.ARRANGE, [RED_RECT, BLUE_RECT], arrangement="horizontal")
        assert result.enhanced_params["arrangement"] == "row"

    def test_distribute_axis(self):
        result = _validate(Action.DISTRIBUTE, [RED_RECT, BLUE_RECT, GREEN_CIRCLE], axis="vertical")
        assert result.enhanced_params["axis"] == "vertical"
        assert not result.warnings

    def test_distribute_few_shapes_warns(self):
        result = _validate(Action.DISTRIBUTE, [RED_RECT, BLUE_RECT])
        assert result.is_valid
        assert result.warnings


class TestCreateMany:
    def test_basic(self):
        result = _validate(Action.CREATE_MANY, count="9", shape_type="circle")
        p = result.enhanced_params
        assert result.is_valid
        assert p["count"] == 9
        assert p["kind"] == "ellipse"
        assert p["columns"] == 3
        assert p["fill"] == "#10B981"

    def test_large_batch_warns_but_passes(self):
        result = _validate(Action.CREATE_MANY, count=60)
        assert result.is_valid
        assert any("performance" in w for w in result.warnings)

    def test_threshold_is_configurable(self):
        intent = CommandIntent(action=Action.CREATE_MANY, params={"count": 60})
        result = validate_command(intent, [], EngineConfig(batch_warning_threshold=100))
        assert not result.warnings

    @pytest.mark.parametrize("count", [0, -3, 2.5, "many", None])
    def test_bad_count(self, count):
        assert not _validate(Action.CREATE_MANY, count=count).is_valid


class TestDimensions:
    @pytest.mark.parametrize("action, params", [
        (Action.CREATE, {"width": -100}),
        (Action.CREATE, {"height": 0}),
        (Action.CREATE, {"shape_type": "circle", "radius": 0}),
        (Action.CREATE_MANY, {"count": 3, "width": -8}),
        (Action.CREATE_COMPOSITE, {"composite": "card", "width": 0}),
    ])
    def test_creation_rejects_non_positive(self, action, params):
        result = _validate(action, **params)
        assert not result.is_valid
        assert "must be positive" in result.errors[0]

    def test_resize_rejects_negative_width(self):
        result = _validate(Action.RESIZE, [RED_RECT], shape_id="rect-1", width=-40)
        assert not result.is_valid
        assert result.errors == ["Width must be positive, got -40"]

    def test_explicit_size_is_kept(self):
        result = _validate(Action.CREATE, width=24, height=8)
        assert (result.enhanced_params["width"], result.enhanced_params["height"]) == (24, 8)


class TestComposite:
    @pytest.mark.parametrize("raw, name", [
        ("loginForm", "login-form"),
        ("Login Form", "login-form"),
        ("signin", "login-form"),
        ("navbar", "navigation-bar"),
        ("card", "card"),
    ])
    def test_names_normalize(self, raw, name):
        result = _validate(Action.CREATE_COMPOSITE, composite=raw)
        assert result.is_valid
        assert result.enhanced_params["composite"] == name

    def test_unknown_composite(self):
        result = _validate(Action.CREATE_COMPOSITE, composite="dashboard")
        assert not result.is_valid
        assert result.suggestions == ["card", "login-form", "navigation-bar"]


class TestQuery:
    def test_list_counts(self):
        result = _validate(Action.LIST, [RED_RECT, BLUE_RECT])
        assert result.enhanced_params["count"] == 2


class TestFeedback:
    def test_rejection_mentions_suggestions(self):
        intent = CommandIntent(action=Action.DELETE, params={"description": "purple rectangle"})
        result = validate_command(intent, [RED_RECT])
        message = feedback(intent, result)
        assert message.startswith("Could not delete")
        assert "red rectangle (rect-1)" in message

    def test_create_first(self):
        intent = CommandIntent(action=Action.MOVE, params={"description": "triangle", "x": 0})
        result = validate_command(intent, [])
        assert "create a triangle first" in feedback(intent, result)


class TestScenarios:
    def test_move_missing_circle_on_empty_canvas(self):
        intent = CommandIntent(
            action=Action.MOVE,
            params={"description": "the blue circle", "position": "center"},
            text="move the blue circle to the center",
        )
        result = validate_command(intent, [])
        assert result.is_valid
        assert result.enhanced_params["create_first"] is True
        assert result.enhanced_params["shape_type"] == "circle"

    def test_recolor_blue_of_two(self):
        intent = CommandIntent(
            action=Action.RECOLOR,
            params={"description": "the blue rectangle", "color": "green"},
            text="change the blue rectangle to green",
        )
        result = validate_command(intent, [RED_RECT, BLUE_RECT])
        assert result.enhanced_params["shape_id"] == "rect-2"
        assert result.enhanced_params["color"] == "#10B981"
