from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import TypeAlias

Point: TypeAlias = tuple[float, float]
Color: TypeAlias = tuple[float, float, float, float]

DashPattern = tuple[float, ...] | None


class ConfigError(ValueError):
    """Raised when a diagram configuration cannot be rendered."""


def rgb255(r: int, g: int, b: int, a: int = 255) -> Color:
    return (r / 255.0, g / 255.0, b / 255.0, a / 255.0)


@dataclass(frozen=True, slots=True)
class StrokeStyle:
    color: Color
    width: float = 1.0
    dash_pattern: DashPattern = None


@dataclass(frozen=True, slots=True)
class Palette:
    background: Color = rgb255(0, 0, 0)
    circle: Color = rgb255(127, 127, 127)
    separator: Color = rgb255(64, 64, 64)
    text: Color = rgb255(255, 255, 255)


DEFAULT_DECORATIONS: tuple[StrokeStyle, ...] = (
    StrokeStyle(color=rgb255(255, 0, 0), width=2.0),
    StrokeStyle(color=rgb255(0, 0, 255), width=4.0, dash_pattern=(10.0, 5.0)),
    StrokeStyle(color=rgb255(255, 255, 0, 127), width=1.0),
)


@dataclass(frozen=True, slots=True)
class DiagramConfig:
    width: int
    height: int
    radius: float
    sectors: int
    start_angle: float = 0.0
    end_angle: float = math.tau
    line_width: float = 1.0
    text_rotation: float = math.pi / 2
    font_family: str = "Sans-Serif"
    font_size: float = 32.0
    overlay_path: Path | None = None
    palette: Palette = field(default_factory=Palette)
    decorations: tuple[StrokeStyle, ...] = DEFAULT_DECORATIONS

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ConfigError(f"Canvas size must be positive, got {self.width}x{self.height}")
        if self.radius <= 0:
            raise ConfigError(f"Circle radius must be positive, got {self.radius}")
        if self.sectors < 1:
            raise ConfigError(f"Sector count must be at least 1, got {self.sectors}")
        if self.end_angle <= self.start_angle:
            raise ConfigError(
                f"End angle ({self.end_angle}) must be greater than start angle ({self.start_angle})"
            )
        if self.sectors < len(self.decorations):
            raise ConfigError(
                f"{len(self.decorations)} decorative lines need at least as many sectors, got {self.sectors}"
            )
        if self.line_width <= 0:
            raise ConfigError(f"Separator line width must be positive, got {self.line_width}")
        if self.font_size <= 0:
            raise ConfigError(f"Font size must be positive, got {self.font_size}")

    @property
    def center(self) -> Point:
        return (self.width / 2, self.height / 2)

    @property
    def sector_width(self) -> float:
        return (self.end_angle - self.start_angle) / self.sectors

    @property
    def half_sector(self) -> float:
        return self.sector_width / 2

    def with_overlay(self, path: str | Path | None) -> DiagramConfig:
        return replace(self, overlay_path=Path(path) if path else None)


@dataclass(slots=True)
class RectEntity:
    origin: Point
    width: float
    height: float
    color: Color
    layer: str = "BACKGROUND"


@dataclass(slots=True)
class DiskEntity:
    center: Point
    radius: float
    start_angle: float  # radians, clockwise in device space
    end_angle: float
    color: Color
    layer: str = "CIRCLE"


@dataclass(slots=True)
class LineEntity:
    start: Point
    end: Point
    color: Color
    width: float = 1.0
    layer: str = "0"
    dash_pattern: DashPattern = None


@dataclass(slots=True)
class TextEntity:
    text: str
    insert: Point
    height: float
    rotation: float = 0.0  # radians, device space
    font_family: str = "Sans-Serif"
    color: Color = (1.0, 1.0, 1.0, 1.0)
    layer: str = "LABELS"


@dataclass(slots=True)
class ImageEntity:
    path: Path | None
    origin: Point
    width: int
    height: int
    layer: str = "OVERLAY"


Entity: TypeAlias = RectEntity | DiskEntity | LineEntity | TextEntity | ImageEntity
