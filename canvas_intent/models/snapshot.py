"""Canvas object snapshot model."""

from __future__ import annotations

import enum

from pydantic import BaseModel, model_validator


class ShapeKind(str, enum.Enum):
    RECTANGLE = "rectangle"
    ELLIPSE = "ellipse"
    TRIANGLE = "triangle"
    LINE = "line"
    TEXT = "text"
    TEXT_INPUT = "text-input"


TEXT_KINDS = frozenset({ShapeKind.TEXT, ShapeKind.TEXT_INPUT})

# (width, height, font_size) defaults per kind
_DEFAULT_EXTENT: dict[ShapeKind, tuple[float, float, int | None]] = {
    ShapeKind.RECTANGLE: (100.0, 100.0, None),
    ShapeKind.ELLIPSE: (100.0, 100.0, None),
    ShapeKind.TRIANGLE: (70.0, 70.0, None),
    ShapeKind.LINE: (100.0, 2.0, None),
    ShapeKind.TEXT: (200.0, 24.0, 16),
    ShapeKind.TEXT_INPUT: (240.0, 40.0, 14),
}


class ObjectSnapshot(BaseModel):
    """One canvas object at resolution time.

    ``x``/``y`` is the top-left corner of the bounding box for every kind;
    ellipses additionally expose their radii, kept in sync with the box.
    """

    id: str
    kind: ShapeKind
    x: float = 0.0
    y: float = 0.0
    width: float | None = None
    height: float | None = None
    radius_x: float | None = None
    radius_y: float | None = None
    fill: str = "#3B82F6"
    text: str | None = None
    font_size: int | None = None
    background: str | None = None  # explicit surface behind text
    rotation: float = 0.0

    @model_validator(mode="after")
    def _populate_extent(self) -> "ObjectSnapshot":
        dw, dh, dfont = _DEFAULT_EXTENT[self.kind]
        if self.kind == ShapeKind.ELLIPSE:
            if self.radius_x is None:
                self.radius_x = self.width / 2 if self.width is not None else dw / 2
            if self.radius_y is None:
                self.radius_y = self.height / 2 if self.height is not None else dh / 2
            self.width = self.radius_x * 2
            self.height = self.radius_y * 2
        else:
            if self.width is None:
                self.width = dw
            if self.height is None:
                self.height = dh
        if self.font_size is None and dfont is not None:
            self.font_size = dfont
        return self

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def is_text_bearing(self) -> bool:
        return self.kind in TEXT_KINDS or bool(self.text)


def default_extent(kind: ShapeKind) -> tuple[float, float]:
    """(width, height) an object of ``kind`` gets when none is given."""
    dw, dh, _ = _DEFAULT_EXTENT[ShapeKind(kind)]
    return (dw, dh)
