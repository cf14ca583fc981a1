from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from .geometry import (
    IDENTITY,
    Matrix,
    apply_matrix,
    matrix_rotation,
    matrix_scale,
    multiply_matrices,
    rotation,
    translation,
)
from .models import Color, DashPattern, DiskEntity, Entity, ImageEntity, LineEntity, Point, RectEntity, TextEntity


@dataclass(slots=True)
class _GraphicsState:
    matrix: Matrix = IDENTITY
    color: Color = (0.0, 0.0, 0.0, 1.0)
    line_width: float = 2.0
    dash_pattern: DashPattern = None
    font_family: str = "Sans-Serif"
    font_size: float = 10.0
    layer: str = "0"
    source_surface: Any = None
    source_origin: Point = (0.0, 0.0)


class RecordingContext:
    """Stand-in for ``cairo.Context`` that records entities in device space.

    Only the drawing calls the composer issues are supported. Path
    coordinates are transformed when they are added, as cairo does.
    """

    def __init__(self) -> None:
        self.entities: list[Entity] = []
        self._state = _GraphicsState()
        self._stack: list[_GraphicsState] = []
        self._path: list[tuple] = []
        self._current: Point | None = None
        self._image_paths: list[tuple[Any, Path]] = []

    def register_image(self, surface: Any, path: Path) -> None:
        self._image_paths.append((surface, path))

    # graphics state

    def save(self) -> None:
        self._stack.append(replace(self._state))

    def restore(self) -> None:
        if not self._stack:
            raise RuntimeError("restore() without matching save()")
        self._state = self._stack.pop()

    def set_layer(self, layer: str) -> None:
        self._state.layer = layer

    def set_source_rgb(self, r: float, g: float, b: float) -> None:
        self.set_source_rgba(r, g, b, 1.0)

    def set_source_rgba(self, r: float, g: float, b: float, a: float = 1.0) -> None:
        self._state.color = (r, g, b, a)
        self._state.source_surface = None

    def set_source_surface(self, surface: Any, x: float = 0.0, y: float = 0.0) -> None:
        self._state.source_surface = surface
        self._state.source_origin = apply_matrix(self._state.matrix, (x, y))

    def set_line_width(self, width: float) -> None:
        self._state.line_width = width

    def set_dash(self, dashes: list[float], offset: float = 0.0) -> None:
        self._state.dash_pattern = tuple(dashes) if dashes else None

    def select_font_face(self, family: str, slant: Any = None, weight: Any = None) -> None:
        self._state.font_family = family

    def set_font_size(self, size: float) -> None:
        self._state.font_size = size

    def translate(self, tx: float, ty: float) -> None:
        self._state.matrix = multiply_matrices(self._state.matrix, translation(tx, ty))

    def rotate(self, angle: float) -> None:
        self._state.matrix = multiply_matrices(self._state.matrix, rotation(angle))

    # path construction

    def new_path(self) -> None:
        self._path = []
        self._current = None

    def move_to(self, x: float, y: float) -> None:
        self._current = apply_matrix(self._state.matrix, (x, y))

    def line_to(self, x: float, y: float) -> None:
        end = apply_matrix(self._state.matrix, (x, y))
        if self._current is None:
            self._current = end
            return
        self._path.append(("line", self._current, end))
        self._current = end

    def rectangle(self, x: float, y: float, width: float, height: float) -> None:
        origin = apply_matrix(self._state.matrix, (x, y))
        scale = matrix_scale(self._state.matrix)
        self._path.append(("rect", origin, width * scale, height * scale))
        self._current = origin

    def arc(self, xc: float, yc: float, radius: float, angle1: float, angle2: float) -> None:
        center = apply_matrix(self._state.matrix, (xc, yc))
        turn = matrix_rotation(self._state.matrix)
        scale = matrix_scale(self._state.matrix)
        self._path.append(("arc", center, radius * scale, angle1 + turn, angle2 + turn))

    # drawing operations

    def stroke(self) -> None:
        state = self._state
        for item in self._path:
            if item[0] != "line":
                continue
            _, start, end = item
            self.entities.append(
                LineEntity(
                    start=start,
                    end=end,
                    color=state.color,
                    width=state.line_width * matrix_scale(state.matrix),
                    layer=state.layer,
                    dash_pattern=state.dash_pattern,
                )
            )
        self.new_path()

    def fill(self) -> None:
        state = self._state
        for item in self._path:
            if item[0] == "rect":
                _, origin, width, height = item
                self.entities.append(
                    RectEntity(origin=origin, width=width, height=height, color=state.color, layer=state.layer)
                )
            elif item[0] == "arc":
                _, center, radius, start_angle, end_angle = item
                self.entities.append(
                    DiskEntity(
                        center=center,
                        radius=radius,
                        start_angle=start_angle,
                        end_angle=end_angle,
                        color=state.color,
                        layer=state.layer,
                    )
                )
        self.new_path()

    def show_text(self, text: str) -> None:
        state = self._state
        insert = self._current if self._current is not None else apply_matrix(state.matrix, (0.0, 0.0))
        self.entities.append(
            TextEntity(
                text=text,
                insert=insert,
                height=state.font_size * matrix_scale(state.matrix),
                rotation=matrix_rotation(state.matrix),
                font_family=state.font_family,
                color=state.color,
                layer=state.layer,
            )
        )

    def paint(self) -> None:
        surface = self._state.source_surface
        if surface is None:
            raise RuntimeError("paint() requires a surface source")
        path = next((p for s, p in self._image_paths if s is surface), None)
        self.entities.append(
            ImageEntity(
                path=path,
                origin=self._state.source_origin,
                width=surface.get_width(),
                height=surface.get_height(),
                layer=self._state.layer,
            )
        )

    # queries

    def entities_on(self, layer: str) -> list[Entity]:
        return [e for e in self.entities if e.layer == layer]
