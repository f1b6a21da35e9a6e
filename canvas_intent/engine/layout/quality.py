"""Canvas-wide quality check: grid alignment, text contrast, minimum font size.

Unlike the composite sanity pass this knows nothing about roles; it looks
at every object on the canvas against the bare design tokens.
"""

from __future__ import annotations

import logging

from canvas_intent.canvas.port import CanvasPort
from canvas_intent.engine.errors import MutationFailed
from canvas_intent.engine.tokens import COLOR_BG, MIN_CONTRAST
from canvas_intent.models.layout import IssueKind, LayoutFix, LayoutIssue, Severity
from canvas_intent.models.snapshot import ObjectSnapshot, ShapeKind
from canvas_intent.utils.color import contrast_ratio, ensure_readable, normalize_color
from canvas_intent.utils.geometry import snap_to_grid

logger = logging.getLogger(__name__)

MIN_FONT_SIZE = 14


def _text_background(obj: ObjectSnapshot) -> str:
    return obj.background or COLOR_BG


def check_quality(snapshot: list[ObjectSnapshot]) -> list[LayoutIssue]:
    issues: list[LayoutIssue] = []
    for obj in snapshot:
        if snap_to_grid(obj.x) != obj.x or snap_to_grid(obj.y) != obj.y:
            issues.append(LayoutIssue(
                kind=IssueKind.OFF_GRID, severity=Severity.MEDIUM, ids=[obj.id],
                message=f"Shape {obj.id} is not aligned to the grid",
            ))
        if obj.kind != ShapeKind.TEXT:
            continue
        if contrast_ratio(obj.fill, _text_background(obj)) < MIN_CONTRAST:
            issues.append(LayoutIssue(
                kind=IssueKind.LOW_CONTRAST, severity=Severity.HIGH, ids=[obj.id],
                message=f"Low contrast for text {obj.id}",
            ))
        if (obj.font_size or 0) < MIN_FONT_SIZE:
            issues.append(LayoutIssue(
                kind=IssueKind.SMALL_FONT, severity=Severity.MEDIUM, ids=[obj.id],
                message=f"Text {obj.id} font size too small ({obj.font_size}px < {MIN_FONT_SIZE}px)",
            ))
    return issues


async def auto_fix(port: CanvasPort) -> list[LayoutFix]:
    """Snap every object to the grid and make low-contrast text readable.

    Small fonts are reported by :func:`check_quality` but never resized.
    """
    fixes: list[LayoutFix] = []
    for obj in port.get_snapshot():
        try:
            x, y = snap_to_grid(obj.x), snap_to_grid(obj.y)
            if x != obj.x or y != obj.y:
                await port.move(obj.id, x, y)
                fixes.append(LayoutFix(kind=IssueKind.OFF_GRID, id=obj.id, changes={"x": x, "y": y}))

            if obj.kind == ShapeKind.TEXT:
                color = ensure_readable(obj.fill, _text_background(obj))
                if color != normalize_color(obj.fill):
                    await port.recolor(obj.id, color)
                    fixes.append(LayoutFix(kind=IssueKind.LOW_CONTRAST, id=obj.id, changes={"fill": color}))
        except Exception as e:
            logger.warning("Auto-fix stopped at %s: %s", obj.id, e)
            raise MutationFailed(f"Auto-fix failed on {obj.id}: {e}", applied=fixes) from e

    logger.info("Auto-fixed %d issues", len(fixes))
    return fixes
