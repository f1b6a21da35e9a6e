"""POST /api/validate and /api/command — check or run one structured command."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from canvas_intent.api.errors import to_http
from canvas_intent.canvas.memory import InMemoryCanvas
from canvas_intent.dependencies import get_canvas, get_engine_config
from canvas_intent.engine.config import EngineConfig
from canvas_intent.engine.errors import CanvasIntentError
from canvas_intent.engine.executor import execute_command
from canvas_intent.engine.validation.command_validator import feedback, validate_command
from canvas_intent.models.intent import CommandOutcome
from canvas_intent.models.requests import CommandRequest
from canvas_intent.models.responses import ValidateResponse

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/validate", response_model=ValidateResponse)
async def validate(
    req: CommandRequest,
    canvas: InMemoryCanvas = Depends(get_canvas),
    config: EngineConfig = Depends(get_engine_config),
) -> ValidateResponse:
    """Dry run: the verdict and enriched params, without touching the canvas."""
    intent = req.to_intent()
    result = validate_command(intent, canvas.get_snapshot(), config)
    return ValidateResponse(validation=result, feedback=feedback(intent, result))


@router.post("/command", response_model=CommandOutcome)
async def command(
    req: CommandRequest,
    canvas: InMemoryCanvas = Depends(get_canvas),
    config: EngineConfig = Depends(get_engine_config),
) -> CommandOutcome:
    intent = req.to_intent()
    try:
        return await execute_command(intent, canvas, config)
    except CanvasIntentError as e:
        logger.info("Command %s refused: %s", intent.action.value, e.message)
        raise to_http(e) from e
