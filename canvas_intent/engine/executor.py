"""Execute one validated command against the canvas interface.

Validation runs against a fresh snapshot, then every mutation is awaited
in order. There is no rollback: when the canvas raises part-way through,
``MutationFailed.applied`` lists what already happened.
"""

from __future__ import annotations

import logging
from typing import Any

from canvas_intent.canvas.port import CanvasPort
from canvas_intent.engine.config import EngineConfig
from canvas_intent.engine.errors import (
    BlueprintUnknown,
    MutationFailed,
    ResolutionNotFound,
    ValidationRejected,
)
from canvas_intent.engine.layout.blueprint import build_blueprint
from canvas_intent.engine.layout.flow import (
    apply_placements,
    plan_arrangement,
    plan_batch,
    plan_blueprint,
    plan_distribution,
    realize_plan,
)
from canvas_intent.engine.layout.sanity import validate_layout
from canvas_intent.engine.resolver.vocabulary import kind_for_word
from canvas_intent.engine.validation.command_validator import feedback, validate_command
from canvas_intent.models.intent import Action, CommandIntent, CommandOutcome, ValidationResult
from canvas_intent.models.snapshot import ObjectSnapshot, ShapeKind

logger = logging.getLogger(__name__)

_CREATE_KEYS = ("x", "y", "width", "height", "fill", "text", "font_size", "background", "rotation")
_RESIZE_KEYS = ("width", "height", "scale", "font_size")
_OVERRIDE_KEYS = ("x", "y", "width", "height", "content")


def raise_for_validation(intent: CommandIntent, validation: ValidationResult) -> None:
    """Turn an invalid verdict into the matching exception."""
    if validation.is_valid:
        return
    message = "; ".join(validation.errors) or f"Invalid {intent.action.value} command"
    if intent.action == Action.CREATE_COMPOSITE:
        raise BlueprintUnknown(message, validation.suggestions)
    if validation.not_found:
        raise ResolutionNotFound(message, validation.suggestions)
    raise ValidationRejected(message, validation.suggestions)


async def execute_command(
    intent: CommandIntent,
    port: CanvasPort,
    config: EngineConfig | None = None,
) -> CommandOutcome:
    config = config or EngineConfig()
    snapshot = port.get_snapshot()
    validation = validate_command(intent, snapshot, config)
    raise_for_validation(intent, validation)

    params = validation.enhanced_params
    outcome = CommandOutcome(action=intent.action, validation=validation, feedback=feedback(intent, validation))
    action = intent.action

    if action == Action.LIST:
        outcome.objects = snapshot
    elif action == Action.CREATE:
        outcome.objects = [await _guarded(port.create, [], ShapeKind(params["kind"]), _pick(params, _CREATE_KEYS))]
    elif action == Action.CREATE_COMPOSITE:
        await _create_composite(params, port, config, outcome)
    elif action == Action.CREATE_MANY:
        outcome.objects = await _create_many(params, port, config)
    elif action == Action.ARRANGE:
        objects = _select(snapshot, params["shape_ids"])
        placements = plan_arrangement(
            objects,
            arrangement=params["arrangement"],
            columns=params["columns"],
            gap=params["spacing"],
            origin=_origin(intent.params),
        )
        outcome.objects = await apply_placements(placements, objects, port)
    elif action == Action.DISTRIBUTE:
        objects = _select(snapshot, params["shape_ids"])
        placements = plan_distribution(objects, axis=params["axis"])
        outcome.objects = await apply_placements(placements, objects, port)
    else:
        outcome.objects = await _manipulate(action, params, port)

    logger.info("Executed %s: %d objects affected", action.value, len(outcome.objects))
    return outcome


async def _guarded(method, applied: list[ObjectSnapshot], *args) -> ObjectSnapshot:
    try:
        return await method(*args)
    except MutationFailed:
        raise
    except Exception as e:
        logger.warning("Canvas call %s failed: %s", getattr(method, "__name__", method), e)
        raise MutationFailed(f"Canvas operation failed: {e}", applied=applied) from e


def _pick(params: dict[str, Any], keys: tuple[str, ...]) -> dict[str, Any]:
    return {k: params[k] for k in keys if params.get(k) is not None}


def _origin(params: dict[str, Any]) -> tuple[float, float] | None:
    if params.get("x") is None or params.get("y") is None:
        return None
    return (float(params["x"]), float(params["y"]))


def _select(snapshot: list[ObjectSnapshot], ids: list[str]) -> list[ObjectSnapshot]:
    by_id = {o.id: o for o in snapshot}
    return [by_id[i] for i in ids if i in by_id]


async def _manipulate(action: Action, params: dict[str, Any], port: CanvasPort) -> list[ObjectSnapshot]:
    applied: list[ObjectSnapshot] = []
    shape_id = params.get("shape_id")

    if params.get("create_first"):
        kind = kind_for_word(params["shape_type"])
        attrs = dict(params.get("create_attributes") or {})
        if kind == ShapeKind.TEXT:
            attrs.setdefault("text", params.get("text") or "Text")
        created = await _guarded(port.create, applied, kind, attrs)
        applied.append(created)
        shape_id = created.id
        logger.info("Created %s before %s", shape_id, action.value)

    if action == Action.MOVE:
        result = await _guarded(port.move, applied, shape_id, params["x"], params["y"])
    elif action == Action.RESIZE:
        result = await _guarded(port.resize, applied, shape_id, _pick(params, _RESIZE_KEYS))
    elif action == Action.ROTATE:
        result = await _guarded(port.rotate, applied, shape_id, params["degrees"])
    elif action == Action.RECOLOR:
        result = await _guarded(port.recolor, applied, shape_id, params["color"])
    elif action == Action.RETEXT:
        result = await _guarded(port.retext, applied, shape_id, str(params["text"]))
    else:
        result = await _guarded(port.delete, applied, shape_id)

    if applied and applied[-1].id == result.id:
        applied[-1] = result
    else:
        applied.append(result)
    return applied


async def _create_many(params: dict[str, Any], port: CanvasPort, config: EngineConfig) -> list[ObjectSnapshot]:
    kind = ShapeKind(params["kind"])
    placements = plan_batch(
        params["count"],
        width=params["width"],
        height=params["height"],
        arrangement=params["arrangement"],
        columns=params["columns"],
        gap=params["spacing"],
        center=config.viewport_center,
        origin=_origin(params),
    )
    created: list[ObjectSnapshot] = []
    for p in placements:
        attrs = {"x": p.x, "y": p.y, "width": p.width, "height": p.height, "fill": params["fill"]}
        created.append(await _guarded(port.create, created, kind, attrs))
    return created


async def _create_composite(
    params: dict[str, Any],
    port: CanvasPort,
    config: EngineConfig,
    outcome: CommandOutcome,
) -> None:
    name = params["composite"]
    overrides = {k: params[k] for k in _OVERRIDE_KEYS if params.get(k) is not None}
    plan = plan_blueprint(build_blueprint(name, overrides))
    created = await realize_plan(plan, port)
    ids = [o.id for o in created]

    report = await validate_layout(name, port, scope_ids=ids, config=config, container_id=ids[0])
    outcome.report = report
    outcome.objects = _select(port.get_snapshot(), ids)
    outcome.feedback = f"Built a {name} with {len(ids)} objects. {report.message}"
