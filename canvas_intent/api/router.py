"""Master API router — mounts all endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from canvas_intent.api import canvas, command, health, layout, resolve

api_router = APIRouter(prefix="/api")

api_router.include_router(health.router)
api_router.include_router(canvas.router)
api_router.include_router(resolve.router)
api_router.include_router(command.router)
api_router.include_router(layout.router)
