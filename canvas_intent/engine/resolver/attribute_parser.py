"""Parse a natural-language object reference into typed attributes.

"the large red circle"      → sizes=[large] colors=[red] kinds=[ellipse]
'text saying "Sign in"'     → kinds=[text] text=[sign in]
"leftmost blue box"         → modifiers=[left] colors=[blue] kinds=[rectangle]
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from canvas_intent.engine.resolver.vocabulary import (
    COLOR_WORDS,
    KIND_WORDS,
    MODIFIER_WORDS,
    SIZE_WORDS,
    STOPWORDS,
)
from canvas_intent.models.snapshot import ShapeKind

logger = logging.getLogger(__name__)

_QUOTED_RE = re.compile(r"\"([^\"]+)\"|“([^”]+)”|'([^']+)'")
_PUNCT_RE = re.compile(r"[^\w-]")

# Unclassified tokens shorter than this are dropped.
_MIN_TEXT_TOKEN = 3


@dataclass
class AttributeSet:
    """Order-independent attribute buckets for one reference. Never persisted."""

    colors: list[str] = field(default_factory=list)
    kinds: list[ShapeKind] = field(default_factory=list)
    sizes: list[str] = field(default_factory=list)
    text: list[str] = field(default_factory=list)
    modifiers: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.colors or self.kinds or self.sizes or self.text or self.modifiers)


def _append_unique(bucket: list, value) -> None:
    if value not in bucket:
        bucket.append(value)


def parse_attributes(reference: str) -> AttributeSet:
    """Tokenize ``reference`` and classify each token into exactly one bucket.

    Priority: colour → kind → size → modifier → residual literal text.
    Quoted spans are lifted whole into ``text`` before tokenizing.
    """
    attrs = AttributeSet()
    if not reference:
        return attrs

    desc = reference.lower().strip()

    for m in _QUOTED_RE.finditer(desc):
        quoted = next(g for g in m.groups() if g is not None).strip()
        if quoted:
            _append_unique(attrs.text, quoted)
    desc = _QUOTED_RE.sub(" ", desc)

    for raw in desc.split():
        token = _PUNCT_RE.sub("", raw).strip("-")
        if not token:
            continue
        if token in COLOR_WORDS:
            _append_unique(attrs.colors, COLOR_WORDS[token])
        elif token in KIND_WORDS:
            _append_unique(attrs.kinds, KIND_WORDS[token])
        elif token in SIZE_WORDS:
            _append_unique(attrs.sizes, SIZE_WORDS[token])
        elif token in MODIFIER_WORDS:
            _append_unique(attrs.modifiers, MODIFIER_WORDS[token])
        elif token in STOPWORDS:
            continue
        elif len(token) >= _MIN_TEXT_TOKEN:
            _append_unique(attrs.text, token)
        else:
            logger.debug("Dropping unclassifiable token %r", token)

    return attrs
