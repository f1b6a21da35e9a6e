"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter

from canvas_intent.engine.layout.blueprint import get_blueprint_registry
from canvas_intent.models.responses import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(
        status="ok",
        version="0.1.0",
        blueprints_registered=get_blueprint_registry().count,
    )
