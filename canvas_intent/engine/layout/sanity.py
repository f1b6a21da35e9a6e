"""Layout sanity pass — certify a composite on the canvas and repair what it can.

Checks run in a fixed order against a working copy of the snapshot:

    container detection → role assignment → off-grid → containment →
    alignment → width → spacing → centring → contrast

Each fix is sent to the canvas immediately and mirrored into the working
copy, so later checks see earlier repairs and a second pass over the
result finds nothing left to fix. Fixes are best-effort, not atomic.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Callable

from canvas_intent.canvas.port import CanvasPort
from canvas_intent.engine.config import EngineConfig
from canvas_intent.engine.errors import MutationFailed
from canvas_intent.engine.layout.blueprint import get_blueprint_registry
from canvas_intent.engine.tokens import COLOR_PRIMARY, COLOR_PRIMARY_DARK, COLOR_WHITE
from canvas_intent.models.layout import IssueKind, LayoutFix, LayoutIssue, SanityReport, Severity
from canvas_intent.models.snapshot import ObjectSnapshot, ShapeKind
from canvas_intent.utils.color import contrast_ratio, normalize_color, readable_text_color
from canvas_intent.utils.geometry import covers, rect, snap_to_grid

logger = logging.getLogger(__name__)

Predicate = Callable[[ObjectSnapshot], bool]

_PRIMARY_FILLS = {COLOR_PRIMARY, COLOR_PRIMARY_DARK}


# ── Role predicates ──

def is_button(o: ObjectSnapshot) -> bool:
    return o.kind == ShapeKind.RECTANGLE and normalize_color(o.fill) in _PRIMARY_FILLS


def is_input(o: ObjectSnapshot) -> bool:
    if o.kind == ShapeKind.TEXT_INPUT:
        return True
    return o.kind == ShapeKind.RECTANGLE and 30 <= o.height <= 50 and o.width >= 200


def is_heading(o: ObjectSnapshot) -> bool:
    return o.kind == ShapeKind.TEXT and (o.font_size or 0) >= 20


def is_text(o: ObjectSnapshot) -> bool:
    return o.kind == ShapeKind.TEXT


def is_menu_item(o: ObjectSnapshot) -> bool:
    return o.kind == ShapeKind.TEXT and 14 <= (o.font_size or 0) <= 18


def is_rectangle(o: ObjectSnapshot) -> bool:
    return o.kind == ShapeKind.RECTANGLE


@dataclass(frozen=True)
class CompositeHeuristics:
    """Everything the sanity pass needs to know about one composite type."""

    container: Predicate
    # First matching predicate assigns the role
    roles: list[tuple[str, Predicate]]
    axis: str = "vertical"
    column_roles: tuple[str, ...] = ()  # members share one X
    row_roles: tuple[str, ...] = ()  # members share one Y
    width_roles: tuple[str, ...] = ()  # members share one width
    spacing_roles: tuple[str, ...] | None = None  # None = every element
    emphasis_role: str | None = None
    # Role whose combined span the emphasized element centres under, or "container"
    center_under: str | None = None


HEURISTICS: dict[str, CompositeHeuristics] = {
    "login-form": CompositeHeuristics(
        container=lambda o: o.kind == ShapeKind.RECTANGLE and o.width >= 300 and o.height >= 200,
        roles=[("button", is_button), ("input", is_input), ("title", is_heading), ("label", is_text)],
        column_roles=("label", "input"),
        width_roles=("input",),
        emphasis_role="button",
        center_under="input",
    ),
    "navigation-bar": CompositeHeuristics(
        container=lambda o: o.kind == ShapeKind.RECTANGLE and o.width >= 600 and 40 <= o.height <= 80,
        roles=[("button", is_button), ("logo", is_heading), ("menu-item", is_menu_item)],
        axis="horizontal",
        row_roles=("menu-item",),
        spacing_roles=("menu-item",),
    ),
    "card": CompositeHeuristics(
        container=lambda o: o.kind == ShapeKind.RECTANGLE and o.width >= 240 and o.height >= 240,
        roles=[("button", is_button), ("title", is_heading), ("image", is_rectangle), ("description", is_text)],
        emphasis_role="button",
        center_under="container",
    ),
}


@dataclass
class _SanityPass:
    composite: str
    rules: CompositeHeuristics
    port: CanvasPort
    config: EngineConfig
    working: dict[str, ObjectSnapshot]
    container_id: str = ""
    element_ids: list[str] = field(default_factory=list)
    roles: dict[str, str] = field(default_factory=dict)
    issues: list[LayoutIssue] = field(default_factory=list)
    fixes: list[LayoutFix] = field(default_factory=list)

    @property
    def container(self) -> ObjectSnapshot:
        return self.working[self.container_id]

    def elements(self, role: str | None = None) -> list[ObjectSnapshot]:
        objs = [self.working[i] for i in self.element_ids]
        if role is None:
            return objs
        return [o for o in objs if self.roles.get(o.id) == role]

    def report(self, kind: IssueKind, severity: Severity, ids: list[str], message: str, fixed: bool) -> None:
        logger.info("%s: %s (%s)", self.composite, message, "fixed" if fixed else "reported")
        self.issues.append(LayoutIssue(kind=kind, severity=severity, ids=ids, message=message, fixed=fixed))

    async def fix(self, kind: IssueKind, obj: ObjectSnapshot, changes: dict[str, Any]) -> None:
        try:
            if "fill" in changes:
                await self.port.recolor(obj.id, changes["fill"])
            elif "width" in changes:
                await self.port.resize(obj.id, {"width": changes["width"]})
            else:
                await self.port.move(obj.id, changes.get("x", obj.x), changes.get("y", obj.y))
        except Exception as e:
            logger.warning("Fix %s on %s failed after %d fixes: %s", kind.value, obj.id, len(self.fixes), e)
            raise MutationFailed(
                f"Layout fix {kind.value} on {obj.id} failed: {e}", applied=self.fixes,
            ) from e
        self.working[obj.id] = obj.model_copy(update=changes)
        self.fixes.append(LayoutFix(kind=kind, id=obj.id, changes=changes))

    # ── Checks ──

    async def check_grid(self) -> None:
        for obj in [self.container, *self.elements()]:
            x, y = snap_to_grid(obj.x), snap_to_grid(obj.y)
            if x != obj.x or y != obj.y:
                self.report(IssueKind.OFF_GRID, Severity.MEDIUM, [obj.id],
                            f"{obj.id} is off the grid at ({obj.x:g}, {obj.y:g})", True)
                await self.fix(IssueKind.OFF_GRID, obj, {"x": x, "y": y})

    def check_containment(self) -> None:
        c = self.container
        outer = rect(c.x, c.y, c.width, c.height)
        for obj in self.elements():
            if not covers(outer, obj.x, obj.y, obj.width, obj.height):
                self.report(IssueKind.CONTAINMENT, Severity.HIGH, [obj.id],
                            f'Element "{obj.text or obj.id}" is outside container bounds', False)

    async def check_alignment(self) -> None:
        for role in self.rules.column_roles:
            await self._align(role, "x")
        for role in self.rules.row_roles:
            await self._align(role, "y")

    async def _align(self, role: str, axis: str) -> None:
        members = self.elements(role)
        values = [getattr(o, axis) for o in members]
        if len(set(values)) <= 1:
            return
        counts = Counter(values)
        top = max(counts.values())
        # Majority value; ties go to the leftmost element's value
        tied = {v for v, n in counts.items() if n == top}
        leftmost = min((o for o in members if getattr(o, axis) in tied), key=lambda o: (o.x, o.y))
        target = getattr(leftmost, axis)
        self.report(IssueKind.MISALIGNMENT, Severity.HIGH, [o.id for o in members],
                    f"{role} elements are not aligned on {axis.upper()}", True)
        for obj in members:
            if getattr(obj, axis) != target:
                await self.fix(IssueKind.MISALIGNMENT, obj, {axis: target})

    async def check_widths(self) -> None:
        for role in self.rules.width_roles:
            members = self.elements(role)
            widths = {o.width for o in members}
            if len(widths) <= 1:
                continue
            widest = max(widths)
            self.report(IssueKind.INCONSISTENT_WIDTH, Severity.MEDIUM, [o.id for o in members],
                        f"{role} elements have different widths", True)
            for obj in members:
                if obj.width != widest:
                    await self.fix(IssueKind.INCONSISTENT_WIDTH, obj, {"width": widest})

    async def check_spacing(self) -> None:
        cfg = self.config
        vertical = self.rules.axis == "vertical"
        pos, extent = ("y", "height") if vertical else ("x", "width")
        ids = [o.id for o in self.elements()
               if self.rules.spacing_roles is None or self.roles.get(o.id) in self.rules.spacing_roles]
        order = {obj_id: i for i, obj_id in enumerate(ids)}
        ids.sort(key=lambda i: (getattr(self.working[i], pos), order[i]))

        for prev_id, next_id in zip(ids, ids[1:]):
            prev, nxt = self.working[prev_id], self.working[next_id]
            end = getattr(prev, pos) + getattr(prev, extent)
            gap = getattr(nxt, pos) - end
            if cfg.gap_min <= gap <= cfg.gap_max:
                continue
            self.report(IssueKind.INCONSISTENT_SPACING, Severity.MEDIUM, [prev.id, nxt.id],
                        f"Spacing between elements is {gap:g}px (should be {cfg.gap_min}-{cfg.gap_max}px)", True)
            await self.fix(IssueKind.INCONSISTENT_SPACING, nxt, {pos: snap_to_grid(end + cfg.gap_target)})

    async def check_centering(self) -> None:
        role, under = self.rules.emphasis_role, self.rules.center_under
        if role is None or under is None:
            return
        if under == "container":
            left, right = self.container.x, self.container.x + self.container.width
        else:
            block = self.elements(under)
            if not block:
                return
            left = min(o.x for o in block)
            right = max(o.x + o.width for o in block)
        center = (left + right) / 2

        for obj in self.elements(role):
            if abs(obj.center[0] - center) <= self.config.center_tolerance:
                continue
            self.report(IssueKind.MISALIGNMENT, Severity.HIGH, [obj.id],
                        f"{role} is not centered below {under}", True)
            await self.fix(IssueKind.MISALIGNMENT, obj, {"x": snap_to_grid(center - obj.width / 2)})

    async def check_contrast(self) -> None:
        c = self.container
        outer = rect(c.x, c.y, c.width, c.height)
        for obj in self.elements():
            if obj.kind != ShapeKind.TEXT:
                continue
            if obj.background:
                background = obj.background
            elif covers(outer, obj.x, obj.y, obj.width, obj.height):
                background = c.fill
            else:
                background = COLOR_WHITE
            ratio = contrast_ratio(obj.fill, background)
            if ratio >= self.config.min_contrast:
                continue
            replacement = readable_text_color(background)
            fixable = normalize_color(replacement) != normalize_color(obj.fill)
            self.report(IssueKind.LOW_CONTRAST, Severity.HIGH, [obj.id],
                        f'Text "{obj.text or obj.id}" has low contrast ({ratio:.1f}:1)', fixable)
            if fixable:
                await self.fix(IssueKind.LOW_CONTRAST, obj, {"fill": replacement})


def _find_container(candidates: list[ObjectSnapshot], predicate: Predicate) -> ObjectSnapshot | None:
    best: ObjectSnapshot | None = None
    for obj in candidates:
        if predicate(obj) and (best is None or obj.area > best.area):
            best = obj
    return best


async def validate_layout(
    composite: str,
    port: CanvasPort,
    scope_ids: list[str] | None = None,
    config: EngineConfig | None = None,
    container_id: str | None = None,
) -> SanityReport:
    """Check and repair one composite on the canvas.

    ``scope_ids`` restricts the pass to those objects (typically the ones
    just created). Without it, the elements are the objects overlapping the
    detected container. ``container_id`` names the container outright and
    skips detection, so a container resized by overrides is still found.
    Raises ``MutationFailed`` when a fix cannot be applied; fixes sent
    before the failure stay on the canvas.
    """
    config = config or EngineConfig()
    name = get_blueprint_registry().get(composite).name
    rules = HEURISTICS[name]

    snapshot = port.get_snapshot()
    if scope_ids is not None:
        scope = set(scope_ids)
        snapshot = [o for o in snapshot if o.id in scope]

    if container_id is not None:
        container = next((o for o in snapshot if o.id == container_id), None)
    else:
        container = _find_container(snapshot, rules.container)
    if container is None:
        issue = LayoutIssue(
            kind=IssueKind.MISSING_CONTAINER, severity=Severity.HIGH,
            message=f"No {name} container found",
        )
        logger.info("%s: no container among %d objects", name, len(snapshot))
        return SanityReport(
            composite=name, valid=False, issues=[issue],
            score=max(0, 100 - 10), message=issue.message,
        )

    outer = rect(container.x, container.y, container.width, container.height)
    if scope_ids is not None:
        elements = [o for o in snapshot if o.id != container.id]
    else:
        elements = [
            o for o in snapshot
            if o.id != container.id and outer.intersects(rect(o.x, o.y, o.width, o.height))
        ]

    roles: dict[str, str] = {}
    for obj in elements:
        for role, predicate in rules.roles:
            if predicate(obj):
                roles[obj.id] = role
                break

    sanity = _SanityPass(
        composite=name, rules=rules, port=port, config=config,
        working={o.id: o for o in [container, *elements]},
        container_id=container.id,
        element_ids=[o.id for o in elements],
        roles=roles,
    )
    await sanity.check_grid()
    sanity.check_containment()
    await sanity.check_alignment()
    await sanity.check_widths()
    await sanity.check_spacing()
    await sanity.check_centering()
    await sanity.check_contrast()

    issues, fixes = sanity.issues, sanity.fixes
    valid = not any(i.severity == Severity.HIGH and not i.fixed for i in issues)
    if not issues:
        message = "Layout is valid and follows design system"
    else:
        message = f"Found {len(issues)} issues, applied {len(fixes)} fixes"
    return SanityReport(
        composite=name,
        valid=valid,
        issues=issues,
        fixes=fixes,
        score=max(0, 100 - 10 * len(issues)),
        message=message,
    )
