"""Tests for the in-process canvas store."""

import asyncio

import pytest

from canvas_intent.canvas.memory import InMemoryCanvas
from canvas_intent.canvas.port import ShapeNotFound
from canvas_intent.models.snapshot import ObjectSnapshot, ShapeKind
from tests.conftest import GREEN_CIRCLE, RED_RECT


def test_ids_follow_creation_order():
    canvas = InMemoryCanvas()
    rect = asyncio.run(canvas.create(ShapeKind.RECTANGLE, {}))
    ellipse = asyncio.run(canvas.create("ellipse", {}))
    assert (rect.id, ellipse.id) == ("rectangle-1", "ellipse-2")
    assert [o.id for o in canvas.get_snapshot()] == ["rectangle-1", "ellipse-2"]


def test_ids_skip_existing():
    canvas = InMemoryCanvas([ObjectSnapshot(id="rectangle-1", kind=ShapeKind.RECTANGLE)])
    assert asyncio.run(canvas.create(ShapeKind.RECTANGLE, {})).id == "rectangle-2"


def test_default_fill_per_kind():
    canvas = InMemoryCanvas()
    text = asyncio.run(canvas.create(ShapeKind.TEXT, {"text": "Hi", "fill": None}))
    assert text.fill == "#1F2937"
    assert text.font_size == 16


def test_unknown_attributes_ignored():
    canvas = InMemoryCanvas()
    obj = asyncio.run(canvas.create(ShapeKind.RECTANGLE, {"x": 8, "bogus": 1}))
    assert obj.x == 8


def test_snapshot_is_a_copy():
    canvas = InMemoryCanvas([RED_RECT])
    snap = canvas.get_snapshot()
    snap[0].x = 999
    assert canvas.get_snapshot()[0].x == 96


def test_move_unknown_raises():
    with pytest.raises(ShapeNotFound):
        asyncio.run(InMemoryCanvas().move("nope", 0, 0))


def test_resize_ellipse_updates_radii():
    canvas = InMemoryCanvas([GREEN_CIRCLE])
    obj = asyncio.run(canvas.resize("circle-1", {"width": 120, "height": 60}))
    assert (obj.radius_x, obj.radius_y) == (60, 30)
    assert (obj.width, obj.height) == (120, 60)


def test_resize_scale_scales_font():
    canvas = InMemoryCanvas([ObjectSnapshot(id="t", kind=ShapeKind.TEXT, text="x", width=100, height=24)])
    obj = asyncio.run(canvas.resize("t", {"scale": 1.5}))
    assert (obj.width, obj.height, obj.font_size) == (150, 36, 24)


def test_rotate_wraps():
    canvas = InMemoryCanvas([RED_RECT])
    assert asyncio.run(canvas.rotate("rect-1", -90)).rotation == 270


def test_recolor_accepts_names():
    canvas = InMemoryCanvas([RED_RECT])
    assert asyncio.run(canvas.recolor("rect-1", "green")).fill == "#10B981"


def test_retext_and_delete():
    canvas = InMemoryCanvas([RED_RECT])
    asyncio.run(canvas.retext("rect-1", "Go"))
    deleted = asyncio.run(canvas.delete("rect-1"))
    assert deleted.text == "Go"
    assert canvas.get_snapshot() == []
    with pytest.raises(ShapeNotFound):
        asyncio.run(canvas.delete("rect-1"))


def test_clear():
    canvas = InMemoryCanvas([RED_RECT, GREEN_CIRCLE])
    canvas.clear()
    assert canvas.get_snapshot() == []
