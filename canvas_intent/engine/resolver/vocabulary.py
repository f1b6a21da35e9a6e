"""Closed vocabularies for object references.

Each table maps a surface word to its canonical value. The parser checks
them in a fixed priority order, so a word listed in two tables belongs to
the first one only.
"""

from __future__ import annotations

from canvas_intent.engine.tokens import PALETTE
from canvas_intent.models.snapshot import ShapeKind

COLOR_WORDS: dict[str, str] = {
    **{name: name for name in PALETTE},
    "grey": "gray",
    "silver": "gray",
    "navy": "blue",
    "azure": "blue",
    "sky": "blue",
    "crimson": "red",
    "scarlet": "red",
    "maroon": "red",
    "emerald": "green",
    "olive": "green",
    "gold": "yellow",
    "amber": "yellow",
    "violet": "purple",
    "lavender": "purple",
    "magenta": "pink",
    "rose": "pink",
    "coral": "orange",
    "turquoise": "teal",
    "aqua": "cyan",
    "charcoal": "black",
    "ivory": "white",
}

KIND_WORDS: dict[str, ShapeKind] = {
    "rectangle": ShapeKind.RECTANGLE,
    "rect": ShapeKind.RECTANGLE,
    "square": ShapeKind.RECTANGLE,
    "box": ShapeKind.RECTANGLE,
    "button": ShapeKind.RECTANGLE,
    "circle": ShapeKind.ELLIPSE,
    "circ": ShapeKind.ELLIPSE,
    "oval": ShapeKind.ELLIPSE,
    "ellipse": ShapeKind.ELLIPSE,
    "dot": ShapeKind.ELLIPSE,
    "triangle": ShapeKind.TRIANGLE,
    "tri": ShapeKind.TRIANGLE,
    "line": ShapeKind.LINE,
    "text": ShapeKind.TEXT,
    "label": ShapeKind.TEXT,
    "heading": ShapeKind.TEXT,
    "title": ShapeKind.TEXT,
    "input": ShapeKind.TEXT_INPUT,
    "field": ShapeKind.TEXT_INPUT,
    "textbox": ShapeKind.TEXT_INPUT,
    "text-input": ShapeKind.TEXT_INPUT,
}

SIZE_WORDS: dict[str, str] = {
    "large": "large",
    "big": "large",
    "huge": "large",
    "massive": "large",
    "giant": "large",
    "small": "small",
    "tiny": "small",
    "mini": "small",
    "micro": "small",
    "little": "small",
    "medium": "medium",
    "normal": "medium",
    "regular": "medium",
}

MODIFIER_WORDS: dict[str, str] = {
    "left": "left",
    "leftmost": "left",
    "right": "right",
    "rightmost": "right",
    "top": "top",
    "upper": "top",
    "topmost": "top",
    "bottom": "bottom",
    "lower": "bottom",
    "center": "center",
    "centre": "center",
    "middle": "center",
    "first": "first",
    "oldest": "first",
    "last": "last",
    "latest": "last",
    "newest": "last",
    "recent": "last",
}

# Filler that never carries literal-text meaning.
STOPWORDS = frozenset({
    "the", "a", "an", "this", "that", "these", "those", "one", "ones",
    "shape", "shapes", "object", "objects", "thing", "with", "and", "of",
    "on", "in", "at", "to", "it", "its", "is", "all", "please",
})

# Fallback kind word per keyword found in a command, checked in order.
FALLBACK_KEYWORDS: list[tuple[str, str]] = [
    ("text-input", "text-input"),
    ("input", "text-input"),
    ("text", "text"),
    ("label", "text"),
    ("rectangle", "rectangle"),
    ("rect", "rectangle"),
    ("square", "rectangle"),
    ("box", "rectangle"),
    ("circle", "circle"),
    ("oval", "circle"),
    ("ellipse", "circle"),
    ("triangle", "triangle"),
    ("line", "line"),
]

# Words used in create-first plans, mapped to the kind actually created.
SHAPE_TYPE_KINDS: dict[str, ShapeKind] = {
    "rectangle": ShapeKind.RECTANGLE,
    "circle": ShapeKind.ELLIPSE,
    "ellipse": ShapeKind.ELLIPSE,
    "triangle": ShapeKind.TRIANGLE,
    "line": ShapeKind.LINE,
    "text": ShapeKind.TEXT,
    "text-input": ShapeKind.TEXT_INPUT,
}


def kind_for_word(word: str | None) -> ShapeKind | None:
    """Map a user-facing shape word ("circle", "square", "rectangle") to a kind."""
    if not word:
        return None
    word = word.strip().lower()
    if word in SHAPE_TYPE_KINDS:
        return SHAPE_TYPE_KINDS[word]
    if word in KIND_WORDS:
        return KIND_WORDS[word]
    try:
        return ShapeKind(word)
    except ValueError:
        return None
