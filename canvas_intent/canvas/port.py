"""The mutation interface supplied by the environment.

Snapshots are read synchronously; every mutation is a suspending call the
engine awaits one at a time. The store behind the port is authoritative:
the engine never caches objects across commands.
"""

from __future__ import annotations

from typing import Any, Protocol

from canvas_intent.models.snapshot import ObjectSnapshot, ShapeKind


class ShapeNotFound(LookupError):
    """Raised by a port when a mutation targets an unknown id."""

    def __init__(self, shape_id: str) -> None:
        super().__init__(f"Shape not found: {shape_id}")
        self.shape_id = shape_id


class CanvasPort(Protocol):
    def get_snapshot(self) -> list[ObjectSnapshot]:
        """All objects in creation order."""
        ...

    async def create(self, kind: ShapeKind, attributes: dict[str, Any]) -> ObjectSnapshot: ...

    async def move(self, shape_id: str, x: float, y: float) -> ObjectSnapshot: ...

    async def resize(self, shape_id: str, attrs: dict[str, Any]) -> ObjectSnapshot: ...

    async def rotate(self, shape_id: str, degrees: float) -> ObjectSnapshot: ...

    async def recolor(self, shape_id: str, color: str) -> ObjectSnapshot: ...

    async def retext(self, shape_id: str, text: str) -> ObjectSnapshot: ...

    async def delete(self, shape_id: str) -> ObjectSnapshot: ...
