"""Layout flow engine — turns blueprints and batch requests into grid-snapped placements.

The primitives here are pure functions over ``Placement`` lists: they read
each placement's width/height and return new placements with positions.
Only :func:`realize_plan` and :func:`apply_placements` touch the canvas.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Literal

from canvas_intent.canvas.port import CanvasPort
from canvas_intent.engine.errors import MutationFailed
from canvas_intent.engine.tokens import GRID
from canvas_intent.models.layout import (
    BlueprintElement,
    LayoutBlueprint,
    LayoutPlan,
    Placement,
)
from canvas_intent.models.snapshot import ObjectSnapshot, ShapeKind
from canvas_intent.utils.geometry import estimate_text_width, snap_to_grid, snap_up

logger = logging.getLogger(__name__)

CONTAINER_REF = "container"

Arrangement = Literal["grid", "row", "column", "circle"]

# Minimum ring radius for circular arrangements.
_MIN_RING_RADIUS = 100


def _place(p: Placement, x: float, y: float) -> Placement:
    return p.model_copy(update={"x": snap_to_grid(x), "y": snap_to_grid(y)})


# ── Primitives ──

def vstack(items: list[Placement], *, x: float, y: float, gap: int) -> list[Placement]:
    """Stack top to bottom from (x, y); each step advances by height + gap."""
    placed = []
    cursor = snap_to_grid(y)
    for item in items:
        p = _place(item, x, cursor)
        placed.append(p)
        cursor = snap_to_grid(p.y + p.height + gap)
    return placed


def hstack(items: list[Placement], *, x: float, y: float, gap: int) -> list[Placement]:
    """Stack left to right from (x, y); each step advances by width + gap."""
    placed = []
    cursor = snap_to_grid(x)
    for item in items:
        p = _place(item, cursor, y)
        placed.append(p)
        cursor = snap_to_grid(p.x + p.width + gap)
    return placed


def grid(items: list[Placement], *, x: float, y: float, columns: int, gap: int) -> list[Placement]:
    """Row-major grid: item i goes to row i // columns, column i % columns.

    The cell pitch is the largest item extent plus the gap, rounded up to
    the grid so every cell origin is an exact grid multiple.
    """
    if not items:
        return []
    columns = max(1, int(columns))
    pitch_x = snap_up(max(p.width for p in items) + gap)
    pitch_y = snap_up(max(p.height for p in items) + gap)
    x0, y0 = snap_to_grid(x), snap_to_grid(y)
    return [
        _place(p, x0 + (i % columns) * pitch_x, y0 + (i // columns) * pitch_y)
        for i, p in enumerate(items)
    ]


def circle(items: list[Placement], *, cx: float, cy: float, radius: float) -> list[Placement]:
    """Centres evenly spaced on a ring, starting at twelve o'clock."""
    n = len(items)
    placed = []
    for i, p in enumerate(items):
        angle = 2 * math.pi * i / n - math.pi / 2
        px = cx + radius * math.cos(angle) - p.width / 2
        py = cy + radius * math.sin(angle) - p.height / 2
        placed.append(_place(p, px, py))
    return placed


def distribute(items: list[Placement], *, axis: Literal["horizontal", "vertical"] = "horizontal") -> list[Placement]:
    """Equalize gaps between items along ``axis``; the outermost two stay put.

    Items are returned in their original order.
    """
    if len(items) < 3:
        return [_place(p, p.x, p.y) for p in items]

    horizontal = axis == "horizontal"
    order = sorted(range(len(items)), key=lambda i: items[i].x if horizontal else items[i].y)
    first, last = items[order[0]], items[order[-1]]
    if horizontal:
        span = (last.x + last.width) - first.x
        total = sum(items[i].width for i in order)
    else:
        span = (last.y + last.height) - first.y
        total = sum(items[i].height for i in order)
    gap = (span - total) / (len(items) - 1)

    result: dict[int, Placement] = {}
    cursor = float(first.x if horizontal else first.y)
    for i in order:
        p = items[i]
        if horizontal:
            result[i] = _place(p, cursor, p.y)
            cursor += p.width + gap
        else:
            result[i] = _place(p, p.x, cursor)
            cursor += p.height + gap
    return [result[i] for i in range(len(items))]


def align_center_x(items: list[Placement], container: Placement) -> list[Placement]:
    cx = container.x + container.width / 2
    return [_place(p, cx - p.width / 2, p.y) for p in items]


def align_left(items: list[Placement], container: Placement, padding: int) -> list[Placement]:
    return [_place(p, container.x + padding, p.y) for p in items]


def align_right(items: list[Placement], container: Placement, padding: int) -> list[Placement]:
    right = container.x + container.width - padding
    return [_place(p, right - p.width, p.y) for p in items]


# ── Blueprint planning ──

@dataclass
class PlanningContext:
    """Transient state for one plan; created and discarded inside a call."""

    container: Placement
    padding: int
    placed: list[Placement] = field(default_factory=list)

    @property
    def inner_x(self) -> int:
        return self.container.x + self.padding

    @property
    def inner_y(self) -> int:
        return self.container.y + self.padding

    @property
    def inner_width(self) -> int:
        return self.container.width - 2 * self.padding


def element_ref(index: int, element: BlueprintElement) -> str:
    return f"{index}:{element.role}"


def _element_width(element: BlueprintElement, ctx: PlanningContext) -> int:
    if element.width is not None:
        return element.width
    if element.kind == ShapeKind.TEXT:
        return min(estimate_text_width(element.content, element.font_size or 16), ctx.inner_width)
    return ctx.inner_width


def plan_blueprint(bp: LayoutBlueprint) -> LayoutPlan:
    """Resolve a blueprint into absolute, grid-snapped placements."""
    c = bp.container
    ax, ay = c.anchor
    container = Placement(
        ref=CONTAINER_REF,
        x=snap_to_grid(ax - c.width / 2),
        y=snap_to_grid(ay - c.height / 2),
        width=c.width,
        height=c.height,
    )
    ctx = PlanningContext(container=container, padding=bp.spacing.padding)

    sized = [
        Placement(
            ref=element_ref(i, el), x=0, y=0,
            width=_element_width(el, ctx), height=el.height,
        )
        for i, el in enumerate(bp.elements)
    ]

    if bp.direction == "vertical":
        ctx.placed = vstack(sized, x=ctx.inner_x, y=ctx.inner_y, gap=bp.spacing.gap)
    else:
        ctx.placed = _plan_row(bp, sized, ctx)

    by_ref = {p.ref: p for p in ctx.placed}
    roles = {element_ref(i, el): el.role for i, el in enumerate(bp.elements)}
    for rule in bp.alignment:
        targets = [p for p in ctx.placed if roles[p.ref] in rule.roles]
        if rule.mode == "center-x":
            aligned = align_center_x(targets, container)
        elif rule.mode == "left":
            aligned = align_left(targets, container, ctx.padding)
        else:
            aligned = align_right(targets, container, ctx.padding)
        by_ref.update({p.ref: p for p in aligned})

    elements = [by_ref[p.ref] for p in ctx.placed]
    logger.info("Planned %s: container at (%d, %d), %d elements", bp.name, container.x, container.y, len(elements))
    return LayoutPlan(blueprint=bp, container=container, elements=elements)


def _plan_row(bp: LayoutBlueprint, sized: list[Placement], ctx: PlanningContext) -> list[Placement]:
    """Horizontal flow: start/center/end slot groups, each vertically centred."""
    c = ctx.container
    gap = bp.spacing.gap
    cy = c.y + c.height / 2
    slots = {"start": [], "center": [], "end": []}
    for el, p in zip(bp.elements, sized):
        slots[el.slot].append(p.model_copy(update={"y": snap_to_grid(cy - p.height / 2)}))

    def group_width(group: list[Placement]) -> int:
        return sum(p.width for p in group) + gap * max(0, len(group) - 1)

    placed: dict[str, Placement] = {}
    starts = {
        "start": ctx.inner_x,
        "center": c.x + c.width / 2 - group_width(slots["center"]) / 2,
        "end": c.x + c.width - ctx.padding - group_width(slots["end"]),
    }
    for slot, group in slots.items():
        cursor = snap_to_grid(starts[slot])
        for p in group:
            q = _place(p, cursor, p.y)
            placed[q.ref] = q
            cursor = snap_to_grid(q.x + q.width + gap)
    return [placed[p.ref] for p in sized]


async def realize_plan(plan: LayoutPlan, port: CanvasPort) -> list[ObjectSnapshot]:
    """Create the container then every element, awaiting each call in order.

    Raises ``MutationFailed`` carrying the objects already created.
    """
    bp = plan.blueprint
    created: list[ObjectSnapshot] = []
    calls = [(ShapeKind.RECTANGLE, {
        "x": plan.container.x, "y": plan.container.y,
        "width": plan.container.width, "height": plan.container.height,
        "fill": bp.container.fill,
    })]
    for el, p in zip(bp.elements, plan.elements):
        attrs = {
            "x": p.x, "y": p.y, "width": p.width, "height": p.height,
            "fill": el.fill, "font_size": el.font_size,
        }
        if el.content:
            attrs["text"] = el.content
        calls.append((el.kind, attrs))

    for kind, attrs in calls:
        try:
            created.append(await port.create(kind, attrs))
        except Exception as e:
            logger.warning("Create failed after %d of %d objects: %s", len(created), len(calls), e)
            raise MutationFailed(
                f"Could not create {kind.value} for {bp.name}: {e}", applied=created,
            ) from e
    return created


# ── Batch creation and arrangement ──

def plan_batch(
    count: int,
    *,
    width: float,
    height: float,
    arrangement: Arrangement = "grid",
    columns: int | None = None,
    gap: int = 16,
    center: tuple[float, float] = (400.0, 300.0),
    origin: tuple[float, float] | None = None,
) -> list[Placement]:
    """Placements for ``count`` new shapes of one size, centred on ``center``
    unless an explicit top-left ``origin`` is given."""
    items = [
        Placement(ref=str(i), x=0, y=0, width=int(width), height=int(height))
        for i in range(count)
    ]
    if not items:
        return []

    if arrangement == "circle":
        pitch = max(width, height) + gap
        radius = max(_MIN_RING_RADIUS, count * pitch / (2 * math.pi))
        cx, cy = center if origin is None else (origin[0] + radius, origin[1] + radius)
        return circle(items, cx=cx, cy=cy, radius=radius)

    cols = _columns_for(arrangement, count, columns)
    if origin is None:
        rows = math.ceil(count / cols)
        pitch_x = snap_up(width + gap)
        pitch_y = snap_up(height + gap)
        total_w = cols * pitch_x - gap
        total_h = rows * pitch_y - gap
        origin = (center[0] - total_w / 2, center[1] - total_h / 2)
    return grid(items, x=origin[0], y=origin[1], columns=cols, gap=gap)


def plan_arrangement(
    objects: list[ObjectSnapshot],
    *,
    arrangement: Arrangement = "grid",
    columns: int | None = None,
    gap: int = 16,
    origin: tuple[float, float] | None = None,
) -> list[Placement]:
    """New positions for existing objects; refs are object ids, order kept."""
    items = [
        Placement(ref=o.id, x=snap_to_grid(o.x), y=snap_to_grid(o.y), width=round(o.width), height=round(o.height))
        for o in objects
    ]
    if not items:
        return []
    if origin is None:
        origin = (min(o.x for o in objects), min(o.y for o in objects))

    if arrangement == "circle":
        pitch = max(max(p.width, p.height) for p in items) + gap
        radius = max(_MIN_RING_RADIUS, len(items) * pitch / (2 * math.pi))
        return circle(items, cx=origin[0] + radius, cy=origin[1] + radius, radius=radius)
    if arrangement == "row":
        return hstack(items, x=origin[0], y=origin[1], gap=gap)
    if arrangement == "column":
        return vstack(items, x=origin[0], y=origin[1], gap=gap)
    return grid(items, x=origin[0], y=origin[1], columns=_columns_for("grid", len(items), columns), gap=gap)


def plan_distribution(
    objects: list[ObjectSnapshot],
    axis: Literal["horizontal", "vertical"] = "horizontal",
) -> list[Placement]:
    items = [
        Placement(ref=o.id, x=round(o.x), y=round(o.y), width=round(o.width), height=round(o.height))
        for o in objects
    ]
    return distribute(items, axis=axis)


def _columns_for(arrangement: str, count: int, columns: int | None) -> int:
    if arrangement == "row":
        return max(1, count)
    if arrangement == "column":
        return 1
    if columns:
        return max(1, int(columns))
    return max(1, math.ceil(math.sqrt(count)))


async def apply_placements(
    placements: list[Placement],
    snapshot: list[ObjectSnapshot],
    port: CanvasPort,
) -> list[ObjectSnapshot]:
    """Move each object whose position differs from its placement."""
    current = {o.id: o for o in snapshot}
    moved: list[ObjectSnapshot] = []
    for p in placements:
        obj = current.get(p.ref)
        if obj is None or (obj.x == p.x and obj.y == p.y):
            continue
        try:
            moved.append(await port.move(p.ref, p.x, p.y))
        except Exception as e:
            logger.warning("Move of %s failed: %s", p.ref, e)
            raise MutationFailed(f"Could not move {p.ref}: {e}", applied=moved) from e
    return moved
