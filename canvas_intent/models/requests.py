"""API request models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from canvas_intent.models.intent import Action, CommandIntent


class ResolveRequest(BaseModel):
    reference: str = Field(..., description='Object reference, e.g. "the large red circle" or an exact id')


class CommandRequest(BaseModel):
    action: Action = Field(..., description="Structured action produced by the language front end")
    params: dict[str, Any] = Field(default_factory=dict, description="Action parameters")
    text: str = Field(default="", description="The user's original wording")

    def to_intent(self) -> CommandIntent:
        return CommandIntent(action=self.action, params=self.params, text=self.text)


class LayoutCheckRequest(BaseModel):
    scope_ids: list[str] | None = Field(
        default=None,
        description="Restrict the pass to these objects (default: everything overlapping the container)",
    )
