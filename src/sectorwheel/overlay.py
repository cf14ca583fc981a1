from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TypeAlias

import cairo


@dataclass(frozen=True, slots=True)
class LoadedOverlay:
    path: Path
    surface: cairo.ImageSurface

    @property
    def width(self) -> int:
        return self.surface.get_width()

    @property
    def height(self) -> int:
        return self.surface.get_height()


@dataclass(frozen=True, slots=True)
class MissingOverlay:
    reason: str


Overlay: TypeAlias = LoadedOverlay | MissingOverlay


def load_overlay(path: str | Path | None) -> Overlay:
    """Decode a PNG overlay; failures become ``MissingOverlay`` rather than errors."""
    if path is None or str(path) == "":
        return MissingOverlay("no overlay configured")

    overlay_path = Path(path)
    if not overlay_path.is_file():
        return MissingOverlay(f"{overlay_path} does not exist")

    try:
        surface = cairo.ImageSurface.create_from_png(str(overlay_path))
    except (cairo.Error, OSError, MemoryError) as exc:
        return MissingOverlay(f"cannot decode {overlay_path}: {exc}")

    if surface.get_width() == 0 or surface.get_height() == 0:
        return MissingOverlay(f"{overlay_path} is empty")
    return LoadedOverlay(path=overlay_path, surface=surface)
