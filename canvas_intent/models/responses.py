"""API response models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from canvas_intent.models.intent import ValidationResult
from canvas_intent.models.layout import LayoutBlueprint, LayoutFix, LayoutIssue, LayoutPlan
from canvas_intent.models.snapshot import ObjectSnapshot


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    blueprints_registered: int = 0


class CanvasResponse(BaseModel):
    objects: list[ObjectSnapshot] = Field(default_factory=list)
    count: int = 0


class ResolveResponse(BaseModel):
    reference: str
    found: bool
    object: ObjectSnapshot | None = None
    description: str = ""
    attributes: dict[str, list[str]] = Field(default_factory=dict)
    suggestions: list[str] = Field(default_factory=list)


class ValidateResponse(BaseModel):
    validation: ValidationResult
    feedback: str = ""


class BlueprintSummary(BaseModel):
    name: str
    aliases: list[str] = Field(default_factory=list)
    description: str = ""


class BlueprintDetailResponse(BaseModel):
    blueprint: LayoutBlueprint
    plan: LayoutPlan


class QualityResponse(BaseModel):
    issues: list[LayoutIssue] = Field(default_factory=list)
    fixes: list[LayoutFix] = Field(default_factory=list)
