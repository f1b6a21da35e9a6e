"""Command intent model — the structured output of the language front end."""

from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, Field

from canvas_intent.models.layout import SanityReport
from canvas_intent.models.snapshot import ObjectSnapshot


class Action(str, enum.Enum):
    CREATE = "create"
    MOVE = "move"
    RESIZE = "resize"
    ROTATE = "rotate"
    RECOLOR = "recolor"
    RETEXT = "retext"
    DELETE = "delete"
    LIST = "list"
    ARRANGE = "arrange"
    CREATE_MANY = "create-many"
    DISTRIBUTE = "distribute"
    CREATE_COMPOSITE = "create-composite"


class CommandCategory(str, enum.Enum):
    CREATION = "creation"
    MANIPULATION = "manipulation"
    LAYOUT = "layout"
    QUERY = "query"


class CommandIntent(BaseModel):
    action: Action
    params: dict[str, Any] = Field(default_factory=dict)
    text: str = ""  # the user's original wording


class ValidationResult(BaseModel):
    """Per-command verdict. Created, consumed immediately, never stored."""

    is_valid: bool = True
    category: CommandCategory | None = None
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    enhanced_params: dict[str, Any] = Field(default_factory=dict)
    reasoning: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)  # at most three
    not_found: bool = False

    def reject(self, error: str, reason: str | None = None) -> None:
        self.is_valid = False
        self.errors.append(error)
        if reason:
            self.reasoning.append(reason)


class CommandOutcome(BaseModel):
    """What one executed command did."""

    action: Action
    feedback: str = ""
    validation: ValidationResult
    objects: list[ObjectSnapshot] = Field(default_factory=list)
    report: SanityReport | None = None
