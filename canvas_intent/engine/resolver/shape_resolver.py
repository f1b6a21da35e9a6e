"""Resolve an imprecise object reference against a canvas snapshot.

Every candidate is scored independently with weights from
:class:`EngineConfig`. A named colour or kind the candidate does not
satisfy is a hard veto (score 0). The highest strictly positive score
wins; ties go to the object created first.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from canvas_intent.engine.config import EngineConfig
from canvas_intent.engine.resolver.attribute_parser import AttributeSet, parse_attributes
from canvas_intent.models.snapshot import ObjectSnapshot, ShapeKind
from canvas_intent.utils.color import color_name, normalize_color

logger = logging.getLogger(__name__)

_WORD_RE = re.compile(r"[a-z0-9]+")

_KIND_LABELS = {
    ShapeKind.RECTANGLE: "rectangle",
    ShapeKind.ELLIPSE: "ellipse",
    ShapeKind.TRIANGLE: "triangle",
    ShapeKind.LINE: "line",
    ShapeKind.TEXT: "text",
    ShapeKind.TEXT_INPUT: "input",
}


@dataclass
class _ModifierFrame:
    """Positional extremes among the candidates that survived the vetoes."""

    min_x: float
    max_x: float
    min_y: float
    max_y: float
    center_id: str
    first_id: str
    last_id: str

    @classmethod
    def build(cls, eligible: list[ObjectSnapshot], snapshot: list[ObjectSnapshot]) -> "_ModifierFrame":
        xs = [obj.center[0] for obj in eligible]
        ys = [obj.center[1] for obj in eligible]
        # Centre of the whole canvas content, not just the eligible set
        mean_x = sum(o.center[0] for o in snapshot) / len(snapshot)
        mean_y = sum(o.center[1] for o in snapshot) / len(snapshot)
        nearest = min(
            eligible,
            key=lambda o: (o.center[0] - mean_x) ** 2 + (o.center[1] - mean_y) ** 2,
        )
        return cls(
            min_x=min(xs), max_x=max(xs), min_y=min(ys), max_y=max(ys),
            center_id=nearest.id, first_id=eligible[0].id, last_id=eligible[-1].id,
        )

    def satisfies(self, obj: ObjectSnapshot, modifier: str) -> bool:
        cx, cy = obj.center
        if modifier == "left":
            return cx == self.min_x
        if modifier == "right":
            return cx == self.max_x
        if modifier == "top":
            return cy == self.min_y
        if modifier == "bottom":
            return cy == self.max_y
        if modifier == "center":
            return obj.id == self.center_id
        if modifier == "first":
            return obj.id == self.first_id
        if modifier == "last":
            return obj.id == self.last_id
        return False


def shape_label(obj: ObjectSnapshot) -> str:
    """User-facing kind word; round ellipses read as circles."""
    if obj.kind == ShapeKind.ELLIPSE and obj.radius_x == obj.radius_y:
        return "circle"
    return _KIND_LABELS[obj.kind]


def size_class(obj: ObjectSnapshot, config: EngineConfig | None = None) -> str:
    """small | medium | large by box area, or by diameter for ellipses."""
    config = config or EngineConfig()
    if obj.kind == ShapeKind.ELLIPSE:
        diameter = (obj.width + obj.height) / 2
        if diameter > config.large_diameter:
            return "large"
        if diameter < config.small_diameter:
            return "small"
        return "medium"
    if obj.area > config.large_area:
        return "large"
    if obj.area < config.small_area:
        return "small"
    return "medium"


def describe_shape(obj: ObjectSnapshot) -> str:
    """Short description such as ``blue rectangle`` or ``text "Login"``."""
    if obj.kind in (ShapeKind.TEXT, ShapeKind.TEXT_INPUT) and obj.text:
        return f'{shape_label(obj)} "{obj.text}"'
    name = color_name(obj.fill)
    label = shape_label(obj)
    return f"{name} {label}" if name else label


def _color_matches(obj: ObjectSnapshot, colors: list[str]) -> bool:
    actual = color_name(obj.fill)
    fill = normalize_color(obj.fill)
    for wanted in colors:
        if actual == wanted or (fill is not None and normalize_color(wanted) == fill):
            return True
    return False


def _passes_vetoes(obj: ObjectSnapshot, attrs: AttributeSet) -> bool:
    if attrs.colors and not _color_matches(obj, attrs.colors):
        return False
    if attrs.kinds and obj.kind not in attrs.kinds:
        return False
    return True


def score_candidate(
    obj: ObjectSnapshot,
    attrs: AttributeSet,
    request: str,
    frame: _ModifierFrame | None = None,
    config: EngineConfig | None = None,
) -> int:
    """Match score for one candidate; 0 excludes it."""
    config = config or EngineConfig()
    if not _passes_vetoes(obj, attrs):
        return 0

    score = 0
    if attrs.colors:
        score += config.color_weight
    if attrs.kinds:
        score += config.kind_weight
    if attrs.sizes and size_class(obj, config) in attrs.sizes:
        score += config.size_weight
    if attrs.text and obj.is_text_bearing and obj.text:
        content = obj.text.lower()
        if any(t in content for t in attrs.text):
            score += config.text_weight
    if attrs.modifiers and frame is not None:
        if any(frame.satisfies(obj, m) for m in attrs.modifiers):
            score += config.modifier_weight

    request = request.lower().strip()
    if request:
        desc = describe_shape(obj).lower()
        if desc in request or request in desc:
            score += config.description_bonus

    logger.debug("Scored %s (%s): %d", obj.id, describe_shape(obj), score)
    return score


def resolve_shape(
    reference: str,
    snapshot: list[ObjectSnapshot],
    config: EngineConfig | None = None,
) -> ObjectSnapshot | None:
    """Pick the single object ``reference`` most plausibly denotes.

    An empty reference (or one that parses to nothing) means "the object",
    which is the first in creation order. Returns None when every
    candidate scores 0.
    """
    if not snapshot:
        return None

    attrs = parse_attributes(reference or "")
    if attrs.is_empty:
        return snapshot[0]

    eligible = [obj for obj in snapshot if _passes_vetoes(obj, attrs)]
    if not eligible:
        logger.info("No object satisfies %r", reference)
        return None

    frame = _ModifierFrame.build(eligible, snapshot) if attrs.modifiers else None

    best: ObjectSnapshot | None = None
    best_score = 0
    for obj in eligible:
        score = score_candidate(obj, attrs, reference, frame, config)
        # Strict comparison keeps the earliest object on ties
        if score > best_score:
            best, best_score = obj, score

    if best is not None:
        logger.info("Resolved %r to %s (score %d)", reference, best.id, best_score)
    return best


def find_by_reference(
    reference: str | None,
    snapshot: list[ObjectSnapshot],
    config: EngineConfig | None = None,
) -> ObjectSnapshot | None:
    """Exact id lookup first, then descriptive resolution."""
    if reference is None:
        return resolve_shape("", snapshot, config)
    for obj in snapshot:
        if obj.id == reference:
            return obj
    return resolve_shape(reference, snapshot, config)


def suggest_shapes(reference: str, snapshot: list[ObjectSnapshot], limit: int = 3) -> list[str]:
    """Up to ``limit`` existing objects sharing a word with the reference."""
    words = set(_WORD_RE.findall((reference or "").lower()))
    attrs = parse_attributes(reference or "")
    words.update(attrs.colors)
    words.update(k.value for k in attrs.kinds)

    suggestions: list[str] = []
    for obj in snapshot:
        desc = describe_shape(obj)
        desc_words = set(_WORD_RE.findall(desc.lower())) | {obj.kind.value}
        if words & desc_words:
            suggestions.append(f"{desc} ({obj.id})")
        if len(suggestions) >= limit:
            break
    return suggestions
