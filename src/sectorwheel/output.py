from __future__ import annotations

import logging
import random
import time
from pathlib import Path
from typing import Callable

import cairo

from .composer import render
from .dxf_writer import UNITS, write_dxf as _write_dxf_entities
from .models import DiagramConfig
from .overlay import LoadedOverlay, Overlay, load_overlay
from .recording import RecordingContext

logger = logging.getLogger(__name__)

FORMATS = ("png", "pdf", "dxf")
DEFAULT_FORMATS = ("png", "pdf")


def write_png(config: DiagramConfig, path: str | Path, rng: random.Random, overlay: Overlay | None = None) -> Path:
    path = Path(path)
    with cairo.ImageSurface(cairo.FORMAT_ARGB32, config.width, config.height) as surface:
        ctx = cairo.Context(surface)
        render(config, ctx, rng, overlay)
        surface.write_to_png(str(path))
    return path


def write_pdf(config: DiagramConfig, path: str | Path, rng: random.Random, overlay: Overlay | None = None) -> Path:
    path = Path(path)
    with cairo.PDFSurface(str(path), config.width, config.height) as surface:
        ctx = cairo.Context(surface)
        render(config, ctx, rng, overlay)
        ctx.show_page()
    return path


def write_dxf(
    config: DiagramConfig,
    path: str | Path,
    rng: random.Random,
    overlay: Overlay | None = None,
    *,
    unit: str = "px",
) -> Path:
    path = Path(path)
    if overlay is None:
        overlay = load_overlay(config.overlay_path)
    ctx = record(config, rng, overlay)
    _write_dxf_entities(path, ctx.entities, canvas_height=config.height, unit=unit)
    return path


def record(config: DiagramConfig, rng: random.Random, overlay: Overlay | None = None) -> RecordingContext:
    """Run the composer against a ``RecordingContext`` and return it."""
    if overlay is None:
        overlay = load_overlay(config.overlay_path)
    ctx = RecordingContext()
    if isinstance(overlay, LoadedOverlay):
        ctx.register_image(overlay.surface, overlay.path)
    render(config, ctx, rng, overlay)
    return ctx


_WRITERS: dict[str, Callable[..., Path]] = {
    "png": write_png,
    "pdf": write_pdf,
    "dxf": write_dxf,
}


def default_seed() -> int:
    return int(time.time())


def render_outputs(
    config: DiagramConfig,
    out_dir: str | Path,
    *,
    seed: int | None = None,
    formats: tuple[str, ...] | list[str] = DEFAULT_FORMATS,
    basename: str = "output",
    dxf_unit: str = "px",
) -> list[Path]:
    """Render every requested artifact with the same decorative line placement.

    Each pass gets its own ``random.Random(seed)`` so the shuffle is replayed
    identically regardless of how many passes ran before it.
    """
    unknown = [fmt for fmt in formats if fmt not in _WRITERS]
    if unknown:
        raise ValueError(f"Unsupported output format(s): {', '.join(unknown)}")
    if dxf_unit.lower() not in UNITS:
        raise ValueError(f"Unsupported output unit: {dxf_unit}")

    if seed is None:
        seed = default_seed()
    logger.info("Using random seed %d", seed)

    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    overlay = load_overlay(config.overlay_path)

    written: list[Path] = []
    for fmt in dict.fromkeys(formats):
        target = out_dir / f"{basename}.{fmt}"
        extra = {"unit": dxf_unit} if fmt == "dxf" else {}
        _WRITERS[fmt](config, target, random.Random(seed), overlay, **extra)
        logger.info("Wrote %s", target)
        written.append(target)
    return written
