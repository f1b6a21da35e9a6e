"""Map domain errors onto HTTP responses."""

from __future__ import annotations

from fastapi import HTTPException

from canvas_intent.engine.errors import (
    BlueprintUnknown,
    CanvasIntentError,
    MutationFailed,
    ResolutionNotFound,
    ValidationRejected,
)

# Most specific first; ResolutionNotFound is also a ValidationRejected
_STATUS: list[tuple[type[CanvasIntentError], int]] = [
    (ResolutionNotFound, 404),
    (BlueprintUnknown, 404),
    (ValidationRejected, 422),
    (MutationFailed, 502),
]


def to_http(err: CanvasIntentError) -> HTTPException:
    status = next((code for cls, code in _STATUS if isinstance(err, cls)), 400)
    return HTTPException(status_code=status, detail=err.to_dict())
