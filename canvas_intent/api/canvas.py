"""GET/DELETE /api/canvas — inspect or reset the shared canvas."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from canvas_intent.canvas.memory import InMemoryCanvas
from canvas_intent.dependencies import get_canvas
from canvas_intent.models.responses import CanvasResponse

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/canvas", response_model=CanvasResponse)
async def get_canvas_state(canvas: InMemoryCanvas = Depends(get_canvas)) -> CanvasResponse:
    objects = canvas.get_snapshot()
    return CanvasResponse(objects=objects, count=len(objects))


@router.delete("/canvas", response_model=CanvasResponse)
async def clear_canvas(canvas: InMemoryCanvas = Depends(get_canvas)) -> CanvasResponse:
    canvas.clear()
    logger.info("Canvas cleared")
    return CanvasResponse()
