"""FastAPI dependency injection."""

from __future__ import annotations

from functools import lru_cache

from canvas_intent.canvas.memory import InMemoryCanvas
from canvas_intent.config import Settings, settings
from canvas_intent.engine.config import EngineConfig


def get_settings() -> Settings:
    return settings


def get_engine_config() -> EngineConfig:
    return EngineConfig(
        viewport_center_x=settings.viewport_width / 2,
        viewport_center_y=settings.viewport_height / 2,
        batch_warning_threshold=settings.batch_warning_threshold,
    )


@lru_cache(maxsize=1)
def get_canvas() -> InMemoryCanvas:
    """Process-wide canvas shared by every request."""
    return InMemoryCanvas()
