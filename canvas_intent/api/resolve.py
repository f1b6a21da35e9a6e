"""POST /api/resolve — which object does a reference denote?"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from canvas_intent.canvas.memory import InMemoryCanvas
from canvas_intent.dependencies import get_canvas, get_engine_config
from canvas_intent.engine.config import EngineConfig
from canvas_intent.engine.errors import MAX_SUGGESTIONS
from canvas_intent.engine.resolver.attribute_parser import parse_attributes
from canvas_intent.engine.resolver.shape_resolver import (
    describe_shape,
    find_by_reference,
    suggest_shapes,
)
from canvas_intent.models.requests import ResolveRequest
from canvas_intent.models.responses import ResolveResponse

router = APIRouter()


@router.post("/resolve", response_model=ResolveResponse)
async def resolve(
    req: ResolveRequest,
    canvas: InMemoryCanvas = Depends(get_canvas),
    config: EngineConfig = Depends(get_engine_config),
) -> ResolveResponse:
    snapshot = canvas.get_snapshot()
    attrs = parse_attributes(req.reference)
    match = find_by_reference(req.reference, snapshot, config)
    return ResolveResponse(
        reference=req.reference,
        found=match is not None,
        object=match,
        description=describe_shape(match) if match else "",
        attributes={
            "colors": attrs.colors,
            "kinds": [k.value for k in attrs.kinds],
            "sizes": attrs.sizes,
            "text": attrs.text,
            "modifiers": attrs.modifiers,
        },
        suggestions=[] if match else suggest_shapes(req.reference, snapshot, MAX_SUGGESTIONS),
    )
