"""Validate and enrich a command intent before anything touches the canvas.

Recognized params (all optional unless the action needs them):

    reference     shape_id | target | description
    position      x, y (top-left) or position ("center", "top-left", ...)
    create        shape_type | kind, width, height, radius, color | fill, text, font_size
    resize        width, height, scale, radius
    rotate        degrees | angle
    recolor       color | fill
    retext        text
    arrange       shape_ids | targets, arrangement, columns, spacing
    distribute    shape_ids | targets, axis | direction
    create-many   count, shape_type, arrangement, columns, spacing, color, width, height
    composite     composite | layout | name, x, y, width, height, content

Everything the validator decides lands in ``enhanced_params`` under
snake_case keys, and every branch explains itself in ``reasoning``.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any

from canvas_intent.engine.config import EngineConfig
from canvas_intent.engine.errors import MAX_SUGGESTIONS
from canvas_intent.engine.layout.blueprint import get_blueprint_registry
from canvas_intent.engine.resolver.attribute_parser import parse_attributes
from canvas_intent.engine.resolver.shape_resolver import (
    describe_shape,
    find_by_reference,
    suggest_shapes,
)
from canvas_intent.engine.resolver.vocabulary import (
    COLOR_WORDS,
    FALLBACK_KEYWORDS,
    kind_for_word,
)
from canvas_intent.engine.tokens import DEFAULT_FILLS, PALETTE
from canvas_intent.models.intent import Action, CommandCategory, CommandIntent, ValidationResult
from canvas_intent.models.snapshot import ObjectSnapshot, ShapeKind, default_extent
from canvas_intent.utils.color import normalize_color

logger = logging.getLogger(__name__)

CATEGORIES: dict[Action, CommandCategory] = {
    Action.CREATE: CommandCategory.CREATION,
    Action.CREATE_COMPOSITE: CommandCategory.CREATION,
    Action.MOVE: CommandCategory.MANIPULATION,
    Action.RESIZE: CommandCategory.MANIPULATION,
    Action.ROTATE: CommandCategory.MANIPULATION,
    Action.RECOLOR: CommandCategory.MANIPULATION,
    Action.RETEXT: CommandCategory.MANIPULATION,
    Action.DELETE: CommandCategory.MANIPULATION,
    Action.ARRANGE: CommandCategory.LAYOUT,
    Action.CREATE_MANY: CommandCategory.LAYOUT,
    Action.DISTRIBUTE: CommandCategory.LAYOUT,
    Action.LIST: CommandCategory.QUERY,
}

# Kind created when a manipulation target is missing; None = never create.
FALLBACK_KINDS: dict[Action, str | None] = {
    Action.MOVE: "rectangle",
    Action.RESIZE: "rectangle",
    Action.ROTATE: "rectangle",
    Action.RECOLOR: "rectangle",
    Action.RETEXT: "text",
    Action.DELETE: None,
}

ARRANGEMENTS = {
    "grid": "grid",
    "row": "row",
    "horizontal": "row",
    "line": "row",
    "column": "column",
    "vertical": "column",
    "stack": "column",
    "circle": "circle",
    "ring": "circle",
}

# Anchor points as fractions of the viewport.
POSITIONS: dict[str, tuple[float, float]] = {
    "center": (0.5, 0.5),
    "centre": (0.5, 0.5),
    "middle": (0.5, 0.5),
    "top": (0.5, 0.25),
    "bottom": (0.5, 0.75),
    "left": (0.25, 0.5),
    "right": (0.75, 0.5),
    "top-left": (0.25, 0.25),
    "top-right": (0.75, 0.25),
    "bottom-left": (0.25, 0.75),
    "bottom-right": (0.75, 0.75),
}

_REFERENCE_KEYS = ("shape_id", "target", "description")
_WORD_RE = re.compile(r"[a-z][a-z-]*")


def categorize(action: Action | str) -> CommandCategory:
    return CATEGORIES[Action(action)]


def canonical_color(value: Any) -> str | None:
    """Palette name, synonym or hex string → canonical upper-case hex."""
    if not isinstance(value, str) or not value.strip():
        return None
    word = value.strip().lower()
    if word in COLOR_WORDS:
        return PALETTE[COLOR_WORDS[word]]
    return normalize_color(word)


def shape_type_for(kind: ShapeKind) -> str:
    """Word used for create-first plans: ellipses are requested as circles."""
    return "circle" if kind == ShapeKind.ELLIPSE else kind.value


def infer_fallback_kind(action: Action, reference: str, text: str = "") -> str | None:
    """Kind word to create when a manipulation target does not exist.

    A kind named in the reference wins, then any shape keyword in the
    command text, then the action's default. Delete never falls back.
    """
    action = Action(action)
    default = FALLBACK_KINDS.get(action)
    if action == Action.DELETE:
        return None

    attrs = parse_attributes(reference)
    if attrs.kinds:
        return shape_type_for(attrs.kinds[0])

    words = set(_WORD_RE.findall(f"{reference} {text}".lower()))
    for keyword, kind_word in FALLBACK_KEYWORDS:
        if keyword in words:
            return kind_word
    return default


def validate_command(
    intent: CommandIntent,
    snapshot: list[ObjectSnapshot],
    config: EngineConfig | None = None,
) -> ValidationResult:
    """Validate one intent against an immutable snapshot.

    Never raises for user-level problems: rejections come back as
    ``is_valid=False`` with errors and suggestions.
    """
    config = config or EngineConfig()
    category = categorize(intent.action)
    result = ValidationResult(category=category, enhanced_params=dict(intent.params))

    if category == CommandCategory.CREATION:
        _validate_creation(intent, result, config)
    elif category == CommandCategory.MANIPULATION:
        _validate_manipulation(intent, snapshot, result, config)
    elif category == CommandCategory.LAYOUT:
        _validate_layout(intent, snapshot, result, config)
    else:
        result.enhanced_params["count"] = len(snapshot)
        result.reasoning.append(f"Listing {len(snapshot)} objects")

    logger.info(
        "Validated %s: valid=%s, %d warnings, %d errors",
        intent.action.value, result.is_valid, len(result.warnings), len(result.errors),
    )
    return result


# ── Shared helpers ──

def _reference(params: dict[str, Any]) -> str:
    for key in _REFERENCE_KEYS:
        value = params.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def _number(params: dict[str, Any], *keys: str) -> float | None:
    for key in keys:
        value = params.get(key)
        if value is None:
            continue
        try:
            return float(value)
        except (TypeError, ValueError):
            continue
    return None


def _position(
    params: dict[str, Any],
    extent: tuple[float, float],
    current: tuple[float, float] | None,
    result: ValidationResult,
    config: EngineConfig,
) -> None:
    """Fill ``x``/``y`` (top-left) from explicit values, a position word or the viewport centre."""
    enhanced = result.enhanced_params
    width, height = extent
    x, y = _number(params, "x"), _number(params, "y")

    word = str(params.get("position") or "").strip().lower().replace(" ", "-")
    if x is None and y is None and word in POSITIONS:
        fx, fy = POSITIONS[word]
        vw, vh = config.viewport_center_x * 2, config.viewport_center_y * 2
        enhanced["x"] = vw * fx - width / 2
        enhanced["y"] = vh * fy - height / 2
        result.reasoning.append(f"Resolved position {word!r} to ({enhanced['x']:g}, {enhanced['y']:g})")
        return

    cx, cy = config.viewport_center
    if x is None:
        x = current[0] if current else cx - width / 2
        if not current:
            result.reasoning.append("No x given - centering horizontally in the viewport")
    if y is None:
        y = current[1] if current else cy - height / 2
        if not current:
            result.reasoning.append("No y given - centering vertically in the viewport")
    enhanced["x"], enhanced["y"] = x, y


def _extent(params: dict[str, Any], kind: ShapeKind) -> tuple[float, float]:
    dw, dh = default_extent(kind)
    radius = _number(params, "radius")
    if radius is not None:
        return (radius * 2, radius * 2)
    width, height = _number(params, "width"), _number(params, "height")
    return (dw if width is None else width, dh if height is None else height)


def _check_dimensions(params: dict[str, Any], result: ValidationResult) -> bool:
    """Reject any width, height or radius that is not strictly positive."""
    for key in ("width", "height", "radius"):
        value = _number(params, key)
        if value is not None and value <= 0:
            result.reject(f"{key.capitalize()} must be positive, got {value:g}")
            return False
    return True


# ── Creation ──

def _validate_creation(intent: CommandIntent, result: ValidationResult, config: EngineConfig) -> None:
    if not _check_dimensions(intent.params, result):
        return
    if intent.action == Action.CREATE_COMPOSITE:
        _validate_composite(intent, result)
        return

    params = intent.params
    enhanced = result.enhanced_params
    word = params.get("shape_type") or params.get("kind")
    if word:
        kind = kind_for_word(str(word))
        if kind is None:
            result.reject(
                f"Unknown shape type: {word!r}",
                "Supported shapes: rectangle, circle, triangle, line, text, text-input",
            )
            result.suggestions = ["rectangle", "circle", "text"]
            return
    else:
        kind = ShapeKind.RECTANGLE
        result.reasoning.append("No shape type given - creating a rectangle")

    enhanced["kind"] = kind.value
    enhanced["shape_type"] = shape_type_for(kind)
    extent = _extent(params, kind)
    enhanced["width"], enhanced["height"] = extent
    _position(params, extent, None, result, config)
    _fill(params, kind, result)

    if kind in (ShapeKind.TEXT, ShapeKind.TEXT_INPUT) and not params.get("text"):
        enhanced["text"] = "Text" if kind == ShapeKind.TEXT else ""
        if kind == ShapeKind.TEXT:
            result.reasoning.append("No text content given - using placeholder 'Text'")


def _fill(params: dict[str, Any], kind: ShapeKind, result: ValidationResult) -> None:
    raw = params.get("color") or params.get("fill")
    color = canonical_color(raw)
    if color is None:
        if raw:
            result.warnings.append(f"Unrecognized color {raw!r} - using the default")
        color = DEFAULT_FILLS[kind.value]
        result.reasoning.append(f"Using default {kind.value} fill {color}")
    result.enhanced_params["fill"] = color
    result.enhanced_params.pop("color", None)


def _validate_composite(intent: CommandIntent, result: ValidationResult) -> None:
    params = intent.params
    raw = params.get("composite") or params.get("layout") or params.get("name") or ""
    registry = get_blueprint_registry()
    name = registry.resolve(str(raw))
    if name is None:
        result.reject(
            f"Unknown composite layout: {raw!r}",
            f"Available composites: {', '.join(registry.names())}",
        )
        result.suggestions = registry.names()[:MAX_SUGGESTIONS]
        return
    result.enhanced_params["composite"] = name
    if name != raw:
        result.reasoning.append(f"Normalized composite {raw!r} to {name!r}")


# ── Manipulation ──

def _validate_manipulation(
    intent: CommandIntent,
    snapshot: list[ObjectSnapshot],
    result: ValidationResult,
    config: EngineConfig,
) -> None:
    action = intent.action
    params = intent.params
    reference = _reference(params)

    if not _check_action_params(action, params, result):
        return

    target = find_by_reference(reference, snapshot, config) if snapshot else None

    if target is None:
        shape_type = infer_fallback_kind(action, reference, intent.text)
        label = reference or "shape"
        if shape_type is None:
            if snapshot:
                result.reject(f'Shape not found: "{label}"', f'No shape matching "{label}" exists on canvas')
                result.suggestions = suggest_shapes(reference, snapshot, MAX_SUGGESTIONS)
                if result.suggestions:
                    result.reasoning.append(f"Did you mean: {', '.join(result.suggestions)}?")
            else:
                result.reject("No shapes found on canvas", "Canvas is empty - nothing to delete")
            result.not_found = True
            return

        if snapshot:
            result.warnings.append(f'Shape not found: "{label}" - will create {shape_type} first')
        else:
            result.warnings.append(f"No shapes found on canvas - will create {shape_type} first")
        result.reasoning.append(f"Will create {shape_type} first, then apply {action.value}")
        enhanced = result.enhanced_params
        enhanced["create_first"] = True
        enhanced["shape_type"] = shape_type
        kind = kind_for_word(shape_type)
        colors = parse_attributes(reference).colors
        create_fill = PALETTE[colors[0]] if colors else DEFAULT_FILLS[kind.value]
        extent = default_extent(kind)
        cx, cy = config.viewport_center
        enhanced["create_attributes"] = {
            "fill": create_fill,
            "x": cx - extent[0] / 2,
            "y": cy - extent[1] / 2,
        }
        _action_params(action, params, extent, None, result, config)
        return

    result.enhanced_params["shape_id"] = target.id
    result.reasoning.append(f"Found shape: {describe_shape(target)} ({target.id})")
    _action_params(action, params, (target.width, target.height), (target.x, target.y), result, config)


def _check_action_params(action: Action, params: dict[str, Any], result: ValidationResult) -> bool:
    if action == Action.RECOLOR:
        raw = params.get("color") or params.get("fill")
        if canonical_color(raw) is None:
            result.reject(f"Unrecognized color: {raw!r}" if raw else "No color given for recolor")
            result.suggestions = ["blue", "red", "green"]
            return False
    elif action == Action.ROTATE:
        if _number(params, "degrees", "angle") is None:
            result.reject("No rotation angle given")
            return False
    elif action == Action.RESIZE:
        if all(_number(params, k) is None for k in ("width", "height", "scale", "radius")):
            result.reject("No size given for resize")
            return False
        scale = _number(params, "scale")
        if scale is not None and scale <= 0:
            result.reject(f"Scale must be positive, got {scale:g}")
            return False
        if not _check_dimensions(params, result):
            return False
    elif action == Action.RETEXT:
        if params.get("text") is None:
            result.reject("No text given for retext")
            return False
    return True


def _action_params(
    action: Action,
    params: dict[str, Any],
    extent: tuple[float, float],
    current: tuple[float, float] | None,
    result: ValidationResult,
    config: EngineConfig,
) -> None:
    enhanced = result.enhanced_params
    if action == Action.MOVE:
        has_target = any(k in params for k in ("x", "y", "position"))
        _position(params, extent, current if has_target else None, result, config)
    elif action == Action.RECOLOR:
        color = canonical_color(params.get("color") or params.get("fill"))
        enhanced["color"] = color
        result.reasoning.append(f"Resolved color to {color}")
    elif action == Action.ROTATE:
        enhanced["degrees"] = _number(params, "degrees", "angle")
    elif action == Action.RESIZE:
        radius = _number(params, "radius")
        if radius is not None:
            enhanced.setdefault("width", radius * 2)
            enhanced.setdefault("height", radius * 2)


# ── Layout ──

def _validate_layout(
    intent: CommandIntent,
    snapshot: list[ObjectSnapshot],
    result: ValidationResult,
    config: EngineConfig,
) -> None:
    if intent.action == Action.CREATE_MANY:
        _validate_create_many(intent, result, config)
        return

    params = intent.params
    enhanced = result.enhanced_params
    if not snapshot:
        result.reject("No shapes found on canvas to arrange", "Canvas is empty - cannot perform layout operations")
        return

    targets = params.get("shape_ids") or params.get("targets") or []
    if isinstance(targets, str):
        targets = [targets]
    if not targets:
        ids = [o.id for o in snapshot]
        result.reasoning.append(f"Using all {len(ids)} shapes for layout operation")
    else:
        ids, missing = [], []
        for entry in targets:
            obj = find_by_reference(str(entry), snapshot, config)
            if obj is None:
                missing.append(str(entry))
            elif obj.id not in ids:
                ids.append(obj.id)
        if missing:
            logger.warning("Dropping unresolved layout targets: %s", missing)
            result.warnings.append(f"Some shapes not found: {', '.join(missing)}")
            result.reasoning.append(f"Using only valid shapes: {len(ids)} shapes")
        if not ids:
            result.reject("None of the requested shapes exist on canvas")
            result.suggestions = suggest_shapes(" ".join(map(str, targets)), snapshot, MAX_SUGGESTIONS)
            return
    enhanced["shape_ids"] = ids
    enhanced.pop("targets", None)

    if intent.action == Action.ARRANGE:
        arrangement = _arrangement(params, result)
        if arrangement is None:
            return
        enhanced["arrangement"] = arrangement
        enhanced["columns"] = _columns(params, len(ids), result)
        enhanced["spacing"] = int(_number(params, "spacing", "gap") or config.arrange_gap)
    else:
        axis = str(params.get("axis") or params.get("direction") or "horizontal").lower()
        if axis not in ("horizontal", "vertical"):
            result.warnings.append(f"Unknown axis {axis!r} - distributing horizontally")
            axis = "horizontal"
        enhanced["axis"] = axis
        if len(ids) < 3:
            result.warnings.append("Fewer than three shapes - distribution only snaps them to the grid")


def _arrangement(params: dict[str, Any], result: ValidationResult) -> str | None:
    raw = str(params.get("arrangement") or params.get("layout") or "grid").lower()
    arrangement = ARRANGEMENTS.get(raw)
    if arrangement is None:
        result.reject(f"Unknown arrangement: {raw!r}")
        result.suggestions = ["grid", "row", "column"]
        return None
    if "arrangement" not in params:
        result.reasoning.append("No arrangement given - using a grid")
    return arrangement


def _columns(params: dict[str, Any], count: int, result: ValidationResult) -> int:
    columns = _number(params, "columns", "cols")
    if columns is None or columns < 1:
        columns = max(1, math.ceil(math.sqrt(count)))
        result.reasoning.append(f"Using {int(columns)} columns for {count} shapes")
    return int(columns)


def _validate_create_many(intent: CommandIntent, result: ValidationResult, config: EngineConfig) -> None:
    params = intent.params
    enhanced = result.enhanced_params
    count = _number(params, "count")
    if count is None or count < 1 or count != int(count):
        result.reject(f"Count must be a positive whole number, got {params.get('count')!r}")
        return
    count = int(count)
    if not _check_dimensions(params, result):
        return
    enhanced["count"] = count
    if count > config.batch_warning_threshold:
        result.warnings.append(f"Creating {count} shapes may impact performance")
        result.reasoning.append(f"Large number of shapes ({count}) - consider using smaller counts")

    word = params.get("shape_type") or params.get("kind") or "rectangle"
    kind = kind_for_word(str(word))
    if kind is None:
        result.reject(f"Unknown shape type: {word!r}")
        result.suggestions = ["rectangle", "circle", "text"]
        return
    enhanced["kind"] = kind.value
    enhanced["shape_type"] = shape_type_for(kind)
    enhanced["width"], enhanced["height"] = _extent(params, kind)

    arrangement = _arrangement(params, result)
    if arrangement is None:
        return
    enhanced["arrangement"] = arrangement
    enhanced["columns"] = _columns(params, count, result)
    enhanced["spacing"] = int(_number(params, "spacing", "gap") or config.arrange_gap)
    _fill(params, kind, result)


# ── Feedback ──

def feedback(intent: CommandIntent, result: ValidationResult) -> str:
    """Short user-facing summary of a validation verdict."""
    action = intent.action.value
    if not result.is_valid:
        message = f"Could not {action}: {result.errors[0] if result.errors else 'invalid command'}"
        if result.suggestions:
            message += f". Did you mean: {', '.join(result.suggestions)}?"
        return message

    params = result.enhanced_params
    if params.get("create_first"):
        return f"No matching shape found, so I'll create a {params['shape_type']} first and then {action} it."
    if intent.action == Action.CREATE_COMPOSITE:
        return f"Building a {params['composite']}."
    if intent.action == Action.CREATE:
        return f"Creating a {params['shape_type']}."
    if intent.action == Action.CREATE_MANY:
        return f"Creating {params['count']} {params['shape_type']}s in a {params['arrangement']}."
    if intent.action in (Action.ARRANGE, Action.DISTRIBUTE):
        return f"{action.capitalize()} {len(params['shape_ids'])} shapes."
    if intent.action == Action.LIST:
        return f"There are {params['count']} objects on the canvas."
    if "shape_id" in params:
        return f"{action.capitalize()} {params['shape_id']}."
    return f"{action.capitalize()}."
