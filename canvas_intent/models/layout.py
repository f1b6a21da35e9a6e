"""Composite layout models — blueprints, placements and sanity reports."""

from __future__ import annotations

import enum
from typing import Any, Literal

from pydantic import BaseModel, Field

from canvas_intent.models.snapshot import ShapeKind


class LayoutContainer(BaseModel):
    width: int
    height: int
    anchor: tuple[float, float]  # centre point on the canvas
    fill: str = "#FFFFFF"


class BlueprintElement(BaseModel):
    role: str  # title, label, input, button, image, menu-item, ...
    kind: ShapeKind
    content: str = ""
    width: int | None = None  # None stretches to the container's inner width
    height: int
    font_size: int | None = None
    fill: str
    # Horizontal flows only: which group along the main axis
    slot: Literal["start", "center", "end"] = "start"


class SpacingRules(BaseModel):
    gap: int = 24  # rhythm between consecutive elements
    padding: int = 24  # container inset


class AlignmentRule(BaseModel):
    """Post-placement pass applied to every element with one of ``roles``."""

    roles: list[str]
    mode: Literal["center-x", "left", "right"]


class LayoutBlueprint(BaseModel):
    """Purely declarative description of one composite layout."""

    name: str
    container: LayoutContainer
    direction: Literal["vertical", "horizontal"] = "vertical"
    elements: list[BlueprintElement] = Field(default_factory=list)
    spacing: SpacingRules = Field(default_factory=SpacingRules)
    alignment: list[AlignmentRule] = Field(default_factory=list)


class Placement(BaseModel):
    ref: str  # element reference: "container" or "<index>:<role>"
    x: int
    y: int
    width: int
    height: int


class LayoutPlan(BaseModel):
    blueprint: LayoutBlueprint
    container: Placement
    elements: list[Placement] = Field(default_factory=list)


class IssueKind(str, enum.Enum):
    MISSING_CONTAINER = "missing-container"
    CONTAINMENT = "containment"
    MISALIGNMENT = "misalignment"
    INCONSISTENT_SPACING = "inconsistent-spacing"
    INCONSISTENT_WIDTH = "inconsistent-width"
    LOW_CONTRAST = "low-contrast"
    OFF_GRID = "off-grid"
    SMALL_FONT = "small-font"


class Severity(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"


class LayoutIssue(BaseModel):
    kind: IssueKind
    severity: Severity
    ids: list[str] = Field(default_factory=list)
    message: str
    fixed: bool = False


class LayoutFix(BaseModel):
    kind: IssueKind
    id: str
    changes: dict[str, Any]


class SanityReport(BaseModel):
    composite: str
    valid: bool
    issues: list[LayoutIssue] = Field(default_factory=list)
    fixes: list[LayoutFix] = Field(default_factory=list)
    score: int = 100
    message: str = ""

