"""Composite blueprints, layout sanity checks and canvas quality checks."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from canvas_intent.api.errors import to_http
from canvas_intent.canvas.memory import InMemoryCanvas
from canvas_intent.dependencies import get_canvas, get_engine_config
from canvas_intent.engine.config import EngineConfig
from canvas_intent.engine.errors import CanvasIntentError
from canvas_intent.engine.layout.blueprint import build_blueprint, get_blueprint_registry
from canvas_intent.engine.layout.flow import plan_blueprint
from canvas_intent.engine.layout.quality import auto_fix, check_quality
from canvas_intent.engine.layout.sanity import validate_layout
from canvas_intent.models.layout import SanityReport
from canvas_intent.models.requests import LayoutCheckRequest
from canvas_intent.models.responses import BlueprintDetailResponse, BlueprintSummary, QualityResponse

router = APIRouter()


@router.get("/blueprints", response_model=list[BlueprintSummary])
async def list_blueprints() -> list[BlueprintSummary]:
    return [
        BlueprintSummary(name=spec.name, aliases=spec.aliases, description=spec.description)
        for spec in get_blueprint_registry().all()
    ]


@router.get("/blueprints/{name}", response_model=BlueprintDetailResponse)
async def get_blueprint(name: str) -> BlueprintDetailResponse:
    """The blueprint and the placements it would produce, without creating anything."""
    try:
        bp = build_blueprint(name)
    except CanvasIntentError as e:
        raise to_http(e) from e
    return BlueprintDetailResponse(blueprint=bp, plan=plan_blueprint(bp))


@router.post("/layout/{name}/check", response_model=SanityReport)
async def check_layout(
    name: str,
    req: LayoutCheckRequest | None = None,
    canvas: InMemoryCanvas = Depends(get_canvas),
    config: EngineConfig = Depends(get_engine_config),
) -> SanityReport:
    scope = req.scope_ids if req else None
    try:
        return await validate_layout(name, canvas, scope_ids=scope, config=config)
    except CanvasIntentError as e:
        raise to_http(e) from e


@router.get("/quality", response_model=QualityResponse)
async def quality(canvas: InMemoryCanvas = Depends(get_canvas)) -> QualityResponse:
    return QualityResponse(issues=check_quality(canvas.get_snapshot()))


@router.post("/quality/fix", response_model=QualityResponse)
async def quality_fix(canvas: InMemoryCanvas = Depends(get_canvas)) -> QualityResponse:
    try:
        fixes = await auto_fix(canvas)
    except CanvasIntentError as e:
        raise to_http(e) from e
    return QualityResponse(issues=check_quality(canvas.get_snapshot()), fixes=fixes)
