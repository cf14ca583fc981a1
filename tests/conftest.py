from pathlib import Path

import cairo
import pytest


@pytest.fixture
def sprite_png(tmp_path: Path) -> Path:
    path = tmp_path / "sun.png"
    with cairo.ImageSurface(cairo.FORMAT_ARGB32, 64, 64) as surface:
        ctx = cairo.Context(surface)
        ctx.set_source_rgb(1.0, 0.8, 0.0)
        ctx.arc(32, 32, 30, 0, 6.2832)
        ctx.fill()
        surface.write_to_png(str(path))
    return path
