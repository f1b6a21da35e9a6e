"""Engine configuration — tunable weights and thresholds."""

from __future__ import annotations

from dataclasses import dataclass

from canvas_intent.engine.tokens import GAP_MAX, GAP_MIN, GAP_TARGET, MIN_CONTRAST


@dataclass
class EngineConfig:
    """Controls scoring, size classification and layout repair tolerances."""

    # Match-score weights. Only the ordering is contractual:
    # color > kind > text > size > modifier.
    color_weight: int = 50
    kind_weight: int = 40
    text_weight: int = 35
    size_weight: int = 30
    modifier_weight: int = 20
    description_bonus: int = 25

    # Size classes: box area (px^2) or ellipse diameter (px)
    large_area: float = 20000.0
    small_area: float = 2500.0
    large_diameter: float = 200.0
    small_diameter: float = 50.0

    # Where new objects land when the request gives no coordinates
    viewport_center_x: float = 400.0
    viewport_center_y: float = 300.0

    # Batch creation above this count gets a performance warning
    batch_warning_threshold: int = 50

    # Default pitch between shapes for create-many / arrange
    arrange_gap: int = 16

    # Accepted gap band between stacked composite elements, and the repair target
    gap_min: int = GAP_MIN
    gap_max: int = GAP_MAX
    gap_target: int = GAP_TARGET

    min_contrast: float = MIN_CONTRAST

    # Horizontal centring tolerance for emphasized elements (px)
    center_tolerance: float = 5.0

    @property
    def viewport_center(self) -> tuple[float, float]:
        return (self.viewport_center_x, self.viewport_center_y)
