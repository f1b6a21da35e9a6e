"""In-process canvas store implementing ``CanvasPort``."""

from __future__ import annotations

import itertools
import logging
from typing import Any

from canvas_intent.canvas.port import ShapeNotFound
from canvas_intent.engine.tokens import DEFAULT_FILLS
from canvas_intent.models.snapshot import ObjectSnapshot, ShapeKind
from canvas_intent.utils.color import normalize_color

logger = logging.getLogger(__name__)

# Attributes a create/resize call may set; anything else is ignored.
_CREATE_FIELDS = {
    "x", "y", "width", "height", "radius_x", "radius_y",
    "fill", "text", "font_size", "background", "rotation",
}
_RESIZE_FIELDS = {"width", "height", "radius_x", "radius_y", "font_size"}


class InMemoryCanvas:
    """Ordered dict of snapshots; list order is creation order."""

    def __init__(self, objects: list[ObjectSnapshot] | None = None) -> None:
        self._objects: dict[str, ObjectSnapshot] = {}
        self._ids = itertools.count(1)
        for obj in objects or []:
            self._objects[obj.id] = obj

    def get_snapshot(self) -> list[ObjectSnapshot]:
        return [obj.model_copy() for obj in self._objects.values()]

    def clear(self) -> None:
        self._objects.clear()

    async def create(self, kind: ShapeKind, attributes: dict[str, Any]) -> ObjectSnapshot:
        kind = ShapeKind(kind)
        data = {k: v for k, v in attributes.items() if k in _CREATE_FIELDS and v is not None}
        data["fill"] = normalize_color(data.get("fill"), DEFAULT_FILLS[kind.value])
        shape_id = self._next_id(kind)
        obj = ObjectSnapshot(id=shape_id, kind=kind, **data)
        self._objects[shape_id] = obj
        logger.debug("Created %s at (%.0f, %.0f)", shape_id, obj.x, obj.y)
        return obj

    async def move(self, shape_id: str, x: float, y: float) -> ObjectSnapshot:
        return self._update(shape_id, {"x": x, "y": y})

    async def resize(self, shape_id: str, attrs: dict[str, Any]) -> ObjectSnapshot:
        obj = self._get(shape_id)
        changes = {k: v for k, v in attrs.items() if k in _RESIZE_FIELDS and v is not None}

        scale = attrs.get("scale")
        if scale is not None:
            changes.setdefault("width", round(obj.width * scale))
            changes.setdefault("height", round(obj.height * scale))
            if obj.font_size:
                changes.setdefault("font_size", round(obj.font_size * scale))

        if obj.kind == ShapeKind.ELLIPSE:
            # Radii are the source of truth for ellipses
            if "width" in changes:
                changes.setdefault("radius_x", changes.pop("width") / 2)
            if "height" in changes:
                changes.setdefault("radius_y", changes.pop("height") / 2)
            changes["width"] = None
            changes["height"] = None
        return self._update(shape_id, changes)

    async def rotate(self, shape_id: str, degrees: float) -> ObjectSnapshot:
        return self._update(shape_id, {"rotation": degrees % 360})

    async def recolor(self, shape_id: str, color: str) -> ObjectSnapshot:
        return self._update(shape_id, {"fill": normalize_color(color, color)})

    async def retext(self, shape_id: str, text: str) -> ObjectSnapshot:
        return self._update(shape_id, {"text": text})

    async def delete(self, shape_id: str) -> ObjectSnapshot:
        obj = self._get(shape_id)
        del self._objects[shape_id]
        logger.debug("Deleted %s", shape_id)
        return obj

    def _get(self, shape_id: str) -> ObjectSnapshot:
        try:
            return self._objects[shape_id]
        except KeyError:
            raise ShapeNotFound(shape_id) from None

    def _update(self, shape_id: str, changes: dict[str, Any]) -> ObjectSnapshot:
        obj = self._get(shape_id)
        # Re-validate so derived extent fields stay consistent
        updated = ObjectSnapshot.model_validate({**obj.model_dump(), **changes})
        self._objects[shape_id] = updated
        return updated

    def _next_id(self, kind: ShapeKind) -> str:
        while True:
            candidate = f"{kind.value}-{next(self._ids)}"
            if candidate not in self._objects:
                return candidate
