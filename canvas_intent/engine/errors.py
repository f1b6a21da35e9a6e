"""Error taxonomy for command processing.

Recoverable ambiguity (an unclassifiable token, a missing coordinate, an
unmatched reference that can be created first) never raises: the default
that was assumed is recorded in the validation reasoning instead.
"""

from __future__ import annotations

from typing import Any

MAX_SUGGESTIONS = 3


class CanvasIntentError(Exception):
    """Base class; carries a human-readable explanation and nearest candidates."""

    def __init__(self, message: str, suggestions: list[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.suggestions = list(suggestions or [])[:MAX_SUGGESTIONS]

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "suggestions": self.suggestions,
        }


class ValidationRejected(CanvasIntentError):
    """The command was refused; fatal for that command only."""


class ResolutionNotFound(ValidationRejected):
    """No candidate scored above zero and no create-first fallback applied."""


class BlueprintUnknown(CanvasIntentError):
    """Composite name is not registered; raised before any object is touched."""


class MutationFailed(CanvasIntentError):
    """The canvas interface raised. Mutations already applied are kept."""

    def __init__(self, message: str, applied: list[Any] | None = None) -> None:
        super().__init__(message)
        self.applied = list(applied or [])

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["applied"] = len(self.applied)
        return data
