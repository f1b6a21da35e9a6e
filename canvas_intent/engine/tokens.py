"""Design tokens shared by the resolver, the flow engine and the sanity pass.

Every coordinate the engine emits lands on the 8px base grid, and every
spacing value is a multiple of it so stacked layouts stay on-grid after
snapping.
"""

# Base grid unit for snapping.
GRID = 8

# Spacing scale (multiples of the 4px half-grid).
SPACING = {"xs": 4, "sm": 8, "md": 16, "lg": 24, "xl": 32}

# Default form/card width.
CONTAINER_WIDTH = 360

COLOR_BG = "#F3F4F6"
COLOR_TEXT = "#111827"  # high-contrast default
COLOR_MUTED = "#6B7280"
COLOR_INPUT_BG = "#FFFFFF"
COLOR_INPUT_BORDER = "#D1D5DB"
COLOR_PRIMARY = "#3B82F6"
COLOR_PRIMARY_DARK = "#2563EB"
COLOR_DANGER = "#EF4444"
COLOR_WHITE = "#FFFFFF"

# WCAG 2.x AA threshold for body text.
MIN_CONTRAST = 4.5

# Canonical hex for each colour name the parser understands.
PALETTE = {
    "blue": "#3B82F6",
    "red": "#EF4444",
    "green": "#10B981",
    "yellow": "#F59E0B",
    "purple": "#8B5CF6",
    "pink": "#EC4899",
    "indigo": "#6366F1",
    "orange": "#F97316",
    "teal": "#14B8A6",
    "cyan": "#06B6D4",
    "lime": "#84CC16",
    "brown": "#92400E",
    "gray": "#6B7280",
    "black": "#000000",
    "white": "#FFFFFF",
}

# Fill used when a create request names no colour.
DEFAULT_FILLS = {
    "rectangle": "#3B82F6",
    "ellipse": "#10B981",
    "triangle": "#EF4444",
    "line": "#111827",
    "text": "#1F2937",
    "text-input": "#FFFFFF",
}

# Vertical/horizontal rhythm enforced by the sanity pass.
GAP_MIN = SPACING["md"]
GAP_MAX = SPACING["xl"]
GAP_TARGET = SPACING["lg"]
