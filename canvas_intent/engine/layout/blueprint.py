"""Blueprint registry — every composite layout is a factory registered via decorator.

Usage:
    @blueprint(name="login-form", aliases=["login", "signin"])
    def login_form() -> LayoutBlueprint:
        return LayoutBlueprint(...)

Adding a new composite = writing one factory with the decorator. The flow
engine and the sanity pass pick it up by name. Blueprints are purely
declarative: no coordinates beyond the container anchor.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable

from canvas_intent.engine.errors import BlueprintUnknown
from canvas_intent.engine.tokens import (
    COLOR_PRIMARY,
    COLOR_TEXT,
    COLOR_WHITE,
    CONTAINER_WIDTH,
    SPACING,
)
from canvas_intent.models.layout import (
    AlignmentRule,
    BlueprintElement,
    LayoutBlueprint,
    LayoutContainer,
    SpacingRules,
)
from canvas_intent.models.snapshot import ShapeKind

logger = logging.getLogger(__name__)

_CAMEL_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_SEPARATOR_RE = re.compile(r"[\s_]+|-+")


@dataclass
class BlueprintSpec:
    name: str
    factory: Callable[[], LayoutBlueprint]
    aliases: list[str] = field(default_factory=list)
    description: str = ""


class BlueprintRegistry:
    """Singleton registry of composite layouts."""

    def __init__(self) -> None:
        self._blueprints: dict[str, BlueprintSpec] = {}
        self._aliases: dict[str, str] = {}

    def register(self, spec: BlueprintSpec) -> None:
        if spec.name in self._blueprints:
            raise ValueError(f"Duplicate blueprint: {spec.name}")
        self._blueprints[spec.name] = spec
        for alias in spec.aliases:
            self._aliases[normalize_composite_name(alias)] = spec.name
        logger.debug("Registered blueprint %s (%d aliases)", spec.name, len(spec.aliases))

    def resolve(self, name: str | None) -> str | None:
        """Canonical blueprint name for a name or alias, or None."""
        key = normalize_composite_name(name or "")
        if key in self._blueprints:
            return key
        return self._aliases.get(key)

    def get(self, name: str) -> BlueprintSpec:
        canonical = self.resolve(name)
        if canonical is None:
            raise BlueprintUnknown(
                f"Unknown composite layout: {name!r}",
                suggestions=self.names(),
            )
        return self._blueprints[canonical]

    def names(self) -> list[str]:
        return sorted(self._blueprints)

    def all(self) -> list[BlueprintSpec]:
        return [self._blueprints[n] for n in self.names()]

    @property
    def count(self) -> int:
        return len(self._blueprints)


# Module-level singleton
_registry = BlueprintRegistry()


def get_blueprint_registry() -> BlueprintRegistry:
    return _registry


def blueprint(*, name: str, aliases: list[str] | None = None, description: str = ""):
    """Decorator to register a blueprint factory."""

    def decorator(fn: Callable[[], LayoutBlueprint]):
        _registry.register(BlueprintSpec(
            name=name,
            factory=fn,
            aliases=aliases or [],
            description=description,
        ))
        return fn

    return decorator


def normalize_composite_name(name: str) -> str:
    """``loginForm`` / ``Login Form`` / ``login_form`` → ``login-form``."""
    name = _CAMEL_RE.sub("-", name.strip())
    parts = [p for p in _SEPARATOR_RE.split(name.lower()) if p]
    return "-".join(parts)


def build_blueprint(name: str, overrides: dict[str, Any] | None = None) -> LayoutBlueprint:
    """Instantiate a registered blueprint with optional overrides.

    Supported overrides: ``width``/``height`` (container size), ``x``/``y``
    (container top-left) and ``content`` mapping a role to a string or a
    list of strings assigned in order to the elements with that role.
    """
    spec = _registry.get(name)
    bp = spec.factory()
    overrides = overrides or {}

    container = bp.container
    width = int(overrides.get("width") or container.width)
    height = int(overrides.get("height") or container.height)
    ax, ay = container.anchor
    if overrides.get("x") is not None:
        ax = float(overrides["x"]) + width / 2
    if overrides.get("y") is not None:
        ay = float(overrides["y"]) + height / 2
    bp.container = container.model_copy(update={"width": width, "height": height, "anchor": (ax, ay)})

    content = overrides.get("content") or {}
    if content:
        bp.elements = _apply_content(bp.elements, content)

    logger.info("Built blueprint %s (%dx%d, %d elements)", bp.name, width, height, len(bp.elements))
    return bp


def _apply_content(elements: list[BlueprintElement], content: dict[str, Any]) -> list[BlueprintElement]:
    queues: dict[str, list[str]] = {}
    for role, value in content.items():
        queues[role] = [value] if isinstance(value, str) else [str(v) for v in value]

    updated = []
    for element in elements:
        queue = queues.get(element.role)
        if queue:
            element = element.model_copy(update={"content": queue.pop(0)})
        updated.append(element)
    return updated


# ── Canonical blueprints ──

_FORM_BG = "#F8FAFC"
_NAV_BG = "#1F2937"
_NAV_ACTIVE = "#60A5FA"
_NAV_MUTED = "#9CA3AF"
_IMAGE_BG = "#E5E7EB"
_BODY_TEXT = "#374151"


@blueprint(
    name="login-form",
    aliases=["login", "signin", "sign-in", "login-page", "sign-in-form"],
    description="Title, username and password fields, submit button",
)
def login_form() -> LayoutBlueprint:
    def label(text: str) -> BlueprintElement:
        return BlueprintElement(
            role="label", kind=ShapeKind.TEXT, content=text,
            height=24, font_size=14, fill=COLOR_TEXT,
        )

    def field_input(placeholder: str) -> BlueprintElement:
        return BlueprintElement(
            role="input", kind=ShapeKind.TEXT_INPUT, content=placeholder,
            height=40, font_size=14, fill=COLOR_WHITE,
        )

    return LayoutBlueprint(
        name="login-form",
        container=LayoutContainer(width=CONTAINER_WIDTH, height=400, anchor=(400, 300), fill=_FORM_BG),
        direction="vertical",
        elements=[
            BlueprintElement(
                role="title", kind=ShapeKind.TEXT, content="Login",
                height=32, font_size=24, fill=COLOR_TEXT,
            ),
            label("Username"),
            field_input("Enter your username"),
            label("Password"),
            field_input("••••••••"),
            BlueprintElement(
                role="button", kind=ShapeKind.RECTANGLE, content="Log In",
                height=40, font_size=16, fill=COLOR_PRIMARY,
            ),
        ],
        spacing=SpacingRules(gap=SPACING["lg"], padding=SPACING["lg"]),
        alignment=[
            AlignmentRule(roles=["title"], mode="center-x"),
            AlignmentRule(roles=["label", "input", "button"], mode="left"),
        ],
    )


@blueprint(
    name="navigation-bar",
    aliases=["nav", "navbar", "nav-bar", "navigation", "header", "menu-bar"],
    description="Logo, four menu items and a call-to-action in one row",
)
def navigation_bar() -> LayoutBlueprint:
    def item(text: str, fill: str) -> BlueprintElement:
        return BlueprintElement(
            role="menu-item", kind=ShapeKind.TEXT, content=text,
            height=24, font_size=16, fill=fill, slot="center",
        )

    return LayoutBlueprint(
        name="navigation-bar",
        container=LayoutContainer(width=800, height=64, anchor=(400, 40), fill=_NAV_BG),
        direction="horizontal",
        elements=[
            BlueprintElement(
                role="logo", kind=ShapeKind.TEXT, content="Brand",
                height=32, font_size=20, fill=COLOR_WHITE, slot="start",
            ),
            item("Home", _NAV_ACTIVE),
            item("About", _NAV_MUTED),
            item("Services", _NAV_MUTED),
            item("Contact", _NAV_MUTED),
            BlueprintElement(
                role="button", kind=ShapeKind.RECTANGLE, content="Get Started",
                width=120, height=40, font_size=14, fill=COLOR_PRIMARY, slot="end",
            ),
        ],
        spacing=SpacingRules(gap=SPACING["lg"], padding=SPACING["lg"]),
    )


@blueprint(
    name="card",
    aliases=["card-layout", "product-card", "info-card", "content-card"],
    description="Title, image placeholder, description and action button",
)
def card() -> LayoutBlueprint:
    return LayoutBlueprint(
        name="card",
        container=LayoutContainer(width=300, height=400, anchor=(400, 300), fill=COLOR_WHITE),
        direction="vertical",
        elements=[
            BlueprintElement(
                role="title", kind=ShapeKind.TEXT, content="Card Title",
                height=32, font_size=20, fill=COLOR_TEXT,
            ),
            BlueprintElement(
                role="image", kind=ShapeKind.RECTANGLE, content="",
                height=160, fill=_IMAGE_BG,
            ),
            BlueprintElement(
                role="description", kind=ShapeKind.TEXT, content="A short description.",
                height=48, font_size=14, fill=_BODY_TEXT,
            ),
            BlueprintElement(
                role="button", kind=ShapeKind.RECTANGLE, content="Learn More",
                width=120, height=40, font_size=14, fill=COLOR_PRIMARY,
            ),
        ],
        spacing=SpacingRules(gap=SPACING["lg"], padding=SPACING["lg"]),
        alignment=[
            AlignmentRule(roles=["title", "image", "description", "button"], mode="center-x"),
        ],
    )
