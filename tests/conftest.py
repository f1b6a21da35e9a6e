"""Shared test fixtures."""

from __future__ import annotations

import pytest

from canvas_intent.canvas.memory import InMemoryCanvas
from canvas_intent.models.snapshot import ObjectSnapshot, ShapeKind


# Sample objects

RED_RECT = ObjectSnapshot(
    id="rect-1", kind=ShapeKind.RECTANGLE, x=96, y=96, width=100, height=100, fill="#EF4444",
)
BLUE_RECT = ObjectSnapshot(
    id="rect-2", kind=ShapeKind.RECTANGLE, x=304, y=96, width=100, height=100, fill="#3B82F6",
)
GREEN_CIRCLE = ObjectSnapshot(
    id="circle-1", kind=ShapeKind.ELLIPSE, x=496, y=296, radius_x=40, radius_y=40, fill="#10B981",
)
HELLO_TEXT = ObjectSnapshot(
    id="text-1", kind=ShapeKind.TEXT, x=96, y=400, width=120, height=24, text="Hello", fill="#111827",
)


def broken_login_form() -> list[ObjectSnapshot]:
    """A login form with a misaligned narrow input, a stretched gap and a faint label."""
    return [
        ObjectSnapshot(id="form", kind=ShapeKind.RECTANGLE, x=224, y=104, width=360, height=400, fill="#F8FAFC"),
        ObjectSnapshot(id="label-user", kind=ShapeKind.TEXT, x=248, y=184, width=72, height=24,
                       text="Username", font_size=14, fill="#111827"),
        ObjectSnapshot(id="input-user", kind=ShapeKind.TEXT_INPUT, x=248, y=232, width=312, height=40),
        ObjectSnapshot(id="label-pass", kind=ShapeKind.TEXT, x=248, y=296, width=72, height=24,
                       text="Password", font_size=14, fill="#9CA3AF"),
        ObjectSnapshot(id="input-pass", kind=ShapeKind.TEXT_INPUT, x=256, y=344, width=280, height=40),
        ObjectSnapshot(id="submit", kind=ShapeKind.RECTANGLE, x=248, y=440, width=312, height=40,
                       text="Log In", fill="#3B82F6"),
    ]


class FlakyCanvas(InMemoryCanvas):
    """In-memory canvas whose ``fail_on`` method raises after ``after`` successful calls."""

    def __init__(self, objects=None, fail_on: str = "move", after: int = 0) -> None:
        super().__init__(objects)
        self.fail_on = fail_on
        self.after = after
        self.calls = 0

    def _tick(self, method: str) -> None:
        if method != self.fail_on:
            return
        if self.calls >= self.after:
            raise RuntimeError(f"{method} unavailable")
        self.calls += 1

    async def create(self, kind, attributes):
        self._tick("create")
        return await super().create(kind, attributes)

    async def move(self, shape_id, x, y):
        self._tick("move")
        return await super().move(shape_id, x, y)

    async def resize(self, shape_id, attrs):
        self._tick("resize")
        return await super().resize(shape_id, attrs)

    async def recolor(self, shape_id, color):
        self._tick("recolor")
        return await super().recolor(shape_id, color)


@pytest.fixture
def empty_canvas() -> InMemoryCanvas:
    return InMemoryCanvas()


@pytest.fixture
def red_blue_canvas() -> InMemoryCanvas:
    return InMemoryCanvas([RED_RECT, BLUE_RECT])


@pytest.fixture
def mixed_canvas() -> InMemoryCanvas:
    return InMemoryCanvas([RED_RECT, BLUE_RECT, GREEN_CIRCLE, HELLO_TEXT])


@pytest.fixture
def broken_login_canvas() -> InMemoryCanvas:
    return InMemoryCanvas(broken_login_form())
