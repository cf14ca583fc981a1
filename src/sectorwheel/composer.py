from __future__ import annotations

import logging
import random
from contextlib import contextmanager
from typing import Any, Iterator

import cairo

from .geometry import decorative_angles, point_on_circle, sector_boundaries
from .models import Color, DiagramConfig, StrokeStyle
from .overlay import MissingOverlay, Overlay, load_overlay

logger = logging.getLogger(__name__)


@contextmanager
def saved_state(ctx: Any, layer: str | None = None) -> Iterator[Any]:
    """Scope a cairo save/restore pair; nested transforms never leak to siblings."""
    ctx.save()
    set_layer = getattr(ctx, "set_layer", None)
    if layer and set_layer is not None:
        set_layer(layer)
    try:
        yield ctx
    finally:
        ctx.restore()


def _set_color(ctx: Any, color: Color) -> None:
    r, g, b, a = color
    if a >= 1.0:
        ctx.set_source_rgb(r, g, b)
    else:
        ctx.set_source_rgba(r, g, b, a)


def render(
    config: DiagramConfig,
    ctx: Any,
    rng: random.Random,
    overlay: Overlay | None = None,
) -> None:
    """Compose the full diagram onto a cairo context.

    ``ctx`` is a ``cairo.Context`` or anything exposing the same drawing calls
    (see ``RecordingContext``). ``rng`` only feeds the decorative line choice,
    so two passes with equally seeded generators draw identical diagrams.
    """
    if overlay is None:
        overlay = load_overlay(config.overlay_path)

    draw_background(config, ctx)
    draw_circle(config, ctx)
    draw_separators(config, ctx)
    draw_labels(config, ctx)
    draw_overlay(config, ctx, overlay)
    draw_decorations(config, ctx, rng)


def draw_background(config: DiagramConfig, ctx: Any) -> None:
    with saved_state(ctx, "BACKGROUND"):
        _set_color(ctx, config.palette.background)
        ctx.rectangle(0, 0, config.width, config.height)
        ctx.fill()


def draw_circle(config: DiagramConfig, ctx: Any) -> None:
    cx, cy = config.center
    with saved_state(ctx, "CIRCLE"):
        _set_color(ctx, config.palette.circle)
        ctx.new_path()
        ctx.arc(cx, cy, config.radius, config.start_angle, config.end_angle)
        ctx.fill()


def draw_separators(config: DiagramConfig, ctx: Any) -> int:
    center = config.center
    boundaries = sector_boundaries(config)
    with saved_state(ctx, "SEPARATORS"):
        _set_color(ctx, config.palette.separator)
        ctx.set_line_width(config.line_width)
        for angle in boundaries:
            ctx.move_to(*center)
            ctx.line_to(*point_on_circle(center, config.radius, angle))
        ctx.stroke()
    return len(boundaries)


def draw_labels(config: DiagramConfig, ctx: Any) -> list[str]:
    labels: list[str] = []
    with saved_state(ctx, "LABELS"):
        ctx.select_font_face(config.font_family, cairo.FONT_SLANT_NORMAL, cairo.FONT_WEIGHT_NORMAL)
        ctx.set_font_size(config.font_size)
        _set_color(ctx, config.palette.text)

        for index, angle in enumerate(sector_boundaries(config), start=1):
            mid_angle = angle + config.half_sector
            x, y = point_on_circle(config.center, config.radius / 2, mid_angle)
            text = str(index)
            with saved_state(ctx):
                ctx.translate(x, y)
                ctx.move_to(0, 0)
                ctx.rotate(mid_angle + config.text_rotation)
                ctx.show_text(text)
            labels.append(text)
    return labels


def draw_overlay(config: DiagramConfig, ctx: Any, overlay: Overlay) -> bool:
    if isinstance(overlay, MissingOverlay):
        logger.debug("Skipping overlay: %s", overlay.reason)
        return False

    cx, cy = config.center
    with saved_state(ctx, "OVERLAY"):
        ctx.set_source_surface(overlay.surface, cx - overlay.width / 2.0, cy - overlay.height / 2.0)
        ctx.paint()
    return True


def draw_decorations(config: DiagramConfig, ctx: Any, rng: random.Random) -> list[float]:
    center = config.center
    angles = decorative_angles(config, rng)
    for angle, style in zip(angles, config.decorations):
        with saved_state(ctx, "DECORATIONS"):
            _stroke_line(ctx, center, point_on_circle(center, config.radius, angle), style)
    return angles


def _stroke_line(ctx: Any, start: tuple[float, float], end: tuple[float, float], style: StrokeStyle) -> None:
    ctx.move_to(*start)
    ctx.line_to(*end)
    _set_color(ctx, style.color)
    ctx.set_line_width(style.width)
    if style.dash_pattern:
        ctx.set_dash(list(style.dash_pattern), 0)
    ctx.stroke()
