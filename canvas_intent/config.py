"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    canvas_intent_env: str = "development"
    canvas_intent_log_level: str = "info"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Visible canvas area; its centre is where unplaced objects land
    viewport_width: int = 800
    viewport_height: int = 600

    # create-many above this count gets a performance warning
    batch_warning_threshold: int = 50

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
