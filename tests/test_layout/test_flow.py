"""Tests for the flow primitives and blueprint planning."""

import asyncio

import pytest

from canvas_intent.canvas.memory import InMemoryCanvas
from canvas_intent.engine.errors import MutationFailed
from canvas_intent.engine.layout.blueprint import build_blueprint, get_blueprint_registry
from canvas_intent.engine.layout.flow import (
    align_center_x,
    align_left,
    align_right,
    apply_placements,
    circle,
    distribute,
    grid,
    hstack,
    plan_arrangement,
    plan_batch,
    plan_blueprint,
    realize_plan,
    vstack,
)
from canvas_intent.models.layout import Placement
from canvas_intent.models.snapshot import ShapeKind
from canvas_intent.utils.geometry import rect
from tests.conftest import BLUE_RECT, GREEN_CIRCLE, RED_RECT, FlakyCanvas


def _items(n, width=40, height=40):
    return [Placement(ref=str(i), x=0, y=0, width=width, height=height) for i in range(n)]


def _on_grid(placements):
    return all(p.x % 8 == 0 and p.y % 8 == 0 for p in placements)


class TestPrimitives:
    def test_vstack(self):
        placed = vstack(_items(3), x=24, y=24, gap=24)
        assert [p.y for p in placed] == [24, 88, 152]
        assert {p.x for p in placed} == {24}

    def test_hstack(self):
        placed = hstack(_items(3, width=100), x=0, y=10, gap=16)
        assert [p.x for p in placed] == [0, 120, 240]
        assert _on_grid(placed)

    def test_grid(self):
        placed = grid(_items(9, 100, 100), x=0, y=0, columns=3, gap=16)
        assert len({p.x for p in placed}) == 3
        assert len({p.y for p in placed}) == 3
        assert placed[4].x == 120 and placed[4].y == 120

    def test_circle_starts_at_top(self):
        placed = circle(_items(4, 20, 20), cx=200, cy=200, radius=100)
        assert placed[0].y < placed[1].y
        assert _on_grid(placed)

    def test_distribute_equalizes_gaps_and_keeps_order(self):
        items = [
            Placement(ref="c", x=400, y=0, width=40, height=40),
            Placement(ref="a", x=0, y=0, width=40, height=40),
            Placement(ref="b", x=100, y=0, width=40, height=40),
        ]
        placed = distribute(items)
        assert [p.ref for p in placed] == ["c", "a", "b"]
        assert [p.x for p in placed] == [400, 0, 200]

    def test_distribute_two_items_only_snaps(self):
        items = [Placement(ref="a", x=3, y=5, width=10, height=10), Placement(ref="b", x=50, y=0, width=10, height=10)]
        placed = distribute(items)
        assert [(p.x, p.y) for p in placed] == [(0, 8), (48, 0)]

    def test_align_within_container(self):
        container = Placement(ref="container", x=224, y=104, width=352, height=400)
        items = [Placement(ref="a", x=0, y=40, width=96, height=40)]
        (centered,) = align_center_x(items, container)
        assert (centered.x, centered.y) == (352, 40)
        assert align_left(items, container, 24)[0].x == 248
        assert align_right(items, container, 24)[0].x == 456


class TestPlanBlueprint:
    def test_login_form(self):
        plan = plan_blueprint(build_blueprint("login-form"))
        assert (plan.container.x, plan.container.y) == (224, 104)
        ys = [p.y for p in plan.elements]
        assert ys == [128, 184, 232, 296, 344, 408]
        title, label, user_input, _, _, button = plan.elements
        assert title.x == 368
        assert label.x == user_input.x == button.x == 248
        assert user_input.width == button.width == 312

    def test_navigation_bar(self):
        plan = plan_blueprint(build_blueprint("navigation-bar"))
        assert (plan.container.x, plan.container.y) == (0, 8)
        logo, *menu, cta = plan.elements
        assert logo.x == 24
        assert [p.x for p in menu] == [248, 312, 384, 488]
        assert {p.y for p in menu} == {32}
        assert cta.x == 656

    def test_card_button_centred(self):
        plan = plan_blueprint(build_blueprint("card"))
        button = plan.elements[-1]
        container_center = plan.container.x + plan.container.width / 2
        assert abs(button.x + button.width / 2 - container_center) <= 5

    @pytest.mark.parametrize("name", get_blueprint_registry().names())
    def test_every_placement_on_grid_and_inside(self, name):
        plan = plan_blueprint(build_blueprint(name))
        outer = rect(plan.container.x, plan.container.y, plan.container.width, plan.container.height)
        assert _on_grid([plan.container, *plan.elements])
        for p in plan.elements:
            assert outer.covers(rect(p.x, p.y, p.width, p.height)), p.ref

    def test_plan_is_deterministic(self):
        assert plan_blueprint(build_blueprint("card")) == plan_blueprint(build_blueprint("card"))


class TestRealize:
    def test_creates_container_first(self):
        canvas = InMemoryCanvas()
        plan = plan_blueprint(build_blueprint("login-form"))
        created = asyncio.run(realize_plan(plan, canvas))
        assert len(created) == 7
        assert created[0].kind == ShapeKind.RECTANGLE
        assert (created[0].x, created[0].y) == (224, 104)
        assert created[1].text == "Login"
        assert [o.id for o in canvas.get_snapshot()] == [o.id for o in created]

    def test_failure_reports_created_objects(self):
        canvas = FlakyCanvas(fail_on="create", after=3)
        plan = plan_blueprint(build_blueprint("card"))
        with pytest.raises(MutationFailed) as exc:
            asyncio.run(realize_plan(plan, canvas))
        assert len(exc.value.applied) == 3
        assert len(canvas.get_snapshot()) == 3


class TestBatch:
    def test_grid_centred_on_viewport(self):
        placed = plan_batch(9, width=100, height=100, columns=3)
        assert len(placed) == 9
        assert len({p.x for p in placed}) == 3
        assert _on_grid(placed)
        xs = [p.x for p in placed] + [p.x + p.width for p in placed]
        assert abs((min(xs) + max(xs)) / 2 - 400) <= 8

    def test_row(self):
        placed = plan_batch(4, width=50, height=50, arrangement="row")
        assert len({p.y for p in placed}) == 1
        assert [p.x for p in placed] == sorted(p.x for p in placed)

    def test_circle(self):
        placed = plan_batch(6, width=40, height=40, arrangement="circle")
        assert len({(p.x, p.y) for p in placed}) == 6
        assert _on_grid(placed)

    def test_explicit_origin(self):
        placed = plan_batch(2, width=40, height=40, arrangement="row", origin=(0, 0))
        assert (placed[0].x, placed[0].y) == (0, 0)

    def test_zero(self):
        assert plan_batch(0, width=40, height=40) == []


class TestArrangement:
    def test_row_keeps_order(self):
        placed = plan_arrangement([GREEN_CIRCLE, RED_RECT, BLUE_RECT], arrangement="row")
        assert [p.ref for p in placed] == ["circle-1", "rect-1", "rect-2"]
        assert len({p.y for p in placed}) == 1
        for a, b in zip(placed, placed[1:]):
            assert b.x >= a.x + a.width

    def test_apply_skips_unmoved(self):
        canvas = InMemoryCanvas([RED_RECT, BLUE_RECT])
        placements = [
            Placement(ref="rect-1", x=96, y=96, width=100, height=100),
            Placement(ref="rect-2", x=200, y=96, width=100, height=100),
        ]
        moved = asyncio.run(apply_placements(placements, canvas.get_snapshot(), canvas))
        assert [o.id for o in moved] == ["rect-2"]
        assert canvas.get_snapshot()[1].x == 200
