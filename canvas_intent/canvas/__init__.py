"""Canvas capability interface consumed by the engine."""

from canvas_intent.canvas.memory import InMemoryCanvas
from canvas_intent.canvas.port import CanvasPort, ShapeNotFound

__all__ = ["CanvasPort", "InMemoryCanvas", "ShapeNotFound"]
