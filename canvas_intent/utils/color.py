"""Colour helpers — hex parsing, naming, WCAG luminance/contrast. No engine imports."""

from __future__ import annotations

import colorsys
import re

import numpy as np

from canvas_intent.engine.tokens import COLOR_TEXT, COLOR_WHITE, MIN_CONTRAST, PALETTE

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

# sRGB transfer-function knee used by WCAG 2.x
_SRGB_KNEE = 0.03928
# Rec. 709 luma coefficients
_LUMA = np.array([0.2126, 0.7152, 0.0722])

# HSV saturation below which hue is meaningless.
_SAT_ACHROMATIC = 0.15
# HSV value thresholds for the achromatic scale.
_VALUE_BLACK = 0.15
_VALUE_WHITE = 0.92
# Orange hues this dark read as brown.
_VALUE_BROWN = 0.6

# Upper hue bound (degrees) for each chromatic name, checked in order.
_HUE_BUCKETS = [
    (15.0, "red"),
    (40.0, "orange"),
    (65.0, "yellow"),
    (150.0, "green"),
    (180.0, "teal"),
    (200.0, "cyan"),
    (240.0, "blue"),
    (255.0, "indigo"),
    (290.0, "purple"),
    (345.0, "pink"),
    (360.0, "red"),
]

# Shades that land in the wrong hue bucket but are named by the UI.
_KNOWN_HEX = {
    **{hex_.upper(): name for name, hex_ in PALETTE.items()},
    "#059669": "green", "#047857": "green", "#34D399": "green", "#6EE7B7": "green",
    "#2563EB": "blue", "#1D4ED8": "blue", "#60A5FA": "blue", "#93C5FD": "blue",
    "#DC2626": "red", "#B91C1C": "red", "#F87171": "red",
    "#EAB308": "yellow", "#FACC15": "yellow", "#FFD700": "yellow",
    "#7C3AED": "purple", "#A78BFA": "purple",
    "#1F2937": "black", "#111827": "black", "#374151": "gray", "#9CA3AF": "gray",
    "#D1D5DB": "gray", "#E5E7EB": "white", "#F3F4F6": "white", "#F8FAFC": "white",
}


def parse_hex(color: str | None) -> tuple[int, int, int] | None:
    """Parse ``#RGB``/``#RRGGBB`` (or a palette name) into an (r, g, b) tuple."""
    if not color:
        return None
    color = color.strip()
    named = PALETTE.get(color.lower())
    if named:
        color = named
    m = _HEX_RE.match(color)
    if not m:
        return None
    digits = m.group(1)
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))


def normalize_color(color: str | None, default: str | None = None) -> str | None:
    """Canonical upper-case ``#RRGGBB`` for a hex string or palette name."""
    rgb = parse_hex(color)
    if rgb is None:
        return default
    return "#{:02X}{:02X}{:02X}".format(*rgb)


def color_name(color: str | None) -> str:
    """Human colour name for a hex fill ("" when it cannot be parsed)."""
    hex_ = normalize_color(color)
    if hex_ is None:
        return ""
    if hex_ in _KNOWN_HEX:
        return _KNOWN_HEX[hex_]

    r, g, b = (c / 255.0 for c in parse_hex(hex_))
    hue, sat, value = colorsys.rgb_to_hsv(r, g, b)
    if value < _VALUE_BLACK:
        return "black"
    if sat < _SAT_ACHROMATIC:
        return "white" if value > _VALUE_WHITE else "gray"
    degrees = hue * 360.0
    for upper, name in _HUE_BUCKETS:
        if degrees < upper:
            if name == "orange" and value < _VALUE_BROWN:
                return "brown"
            return name
    return "red"


def relative_luminance(color: str) -> float:
    """WCAG relative luminance (sRGB gamma-expanded, 0 = black, 1 = white)."""
    rgb = parse_hex(color) or (0, 0, 0)
    channels = np.asarray(rgb, dtype=np.float64) / 255.0
    linear = np.where(
        channels <= _SRGB_KNEE,
        channels / 12.92,
        ((channels + 0.055) / 1.055) ** 2.4,
    )
    return float(np.dot(_LUMA, linear))


def contrast_ratio(foreground: str, background: str) -> float:
    """(L_lighter + 0.05) / (L_darker + 0.05), in [1, 21]."""
    l1 = relative_luminance(foreground)
    l2 = relative_luminance(background)
    lighter, darker = max(l1, l2), min(l1, l2)
    return (lighter + 0.05) / (darker + 0.05)


def is_readable(foreground: str, background: str) -> bool:
    return contrast_ratio(foreground, background) >= MIN_CONTRAST


def readable_text_color(background: str) -> str:
    """High-contrast default text colour for a background.

    The dark default wins whenever it passes; white is the fallback for
    dark surfaces where the dark default is itself unreadable. On mid-tone
    surfaces where neither passes, the higher-contrast of the two.
    """
    if is_readable(COLOR_TEXT, background):
        return COLOR_TEXT
    if contrast_ratio(COLOR_WHITE, background) >= contrast_ratio(COLOR_TEXT, background):
        return COLOR_WHITE
    return COLOR_TEXT


def ensure_readable(color: str, background: str) -> str:
    """Return ``color`` when readable on ``background``, else the high-contrast default."""
    if is_readable(color, background):
        return normalize_color(color, color)
    return readable_text_color(background)
