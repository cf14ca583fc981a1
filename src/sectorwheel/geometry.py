from __future__ import annotations

import logging
import math
import random

from .models import ConfigError, DiagramConfig, Point

logger = logging.getLogger(__name__)

Matrix = tuple[float, float, float, float, float, float]
IDENTITY: Matrix = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)

_ANGLE_EPS = 1e-9


def sector_boundaries(config: DiagramConfig) -> list[float]:
    """Start angle of every sector, enumerated half-open over [start, end)."""
    step = config.sector_width
    out: list[float] = []
    for index in range(config.sectors):
        angle = config.start_angle + index * step
        if angle >= config.end_angle - _ANGLE_EPS:
            break
        out.append(angle)
    return out


def midpoint_angles(config: DiagramConfig) -> list[float]:
    half = config.half_sector
    return [angle + half for angle in sector_boundaries(config)]


def point_on_circle(center: Point, radius: float, angle: float) -> Point:
    cx, cy = center
    return (cx + math.cos(angle) * radius, cy + math.sin(angle) * radius)


def decorative_angles(config: DiagramConfig, rng: random.Random, count: int | None = None) -> list[float]:
    """Shuffle the sector midpoints with ``rng`` and return the first ``count``."""
    if count is None:
        count = len(config.decorations)
    angles = midpoint_angles(config)
    if len(angles) < count:
        raise ConfigError(f"Need {count} sector midpoints for decorative lines, have {len(angles)}")
    rng.shuffle(angles)
    chosen = angles[:count]
    logger.debug("Decorative line angles: %s", ", ".join(f"{a:.4f}" for a in chosen))
    return chosen


def translation(tx: float, ty: float) -> Matrix:
    return (1.0, 0.0, 0.0, 1.0, tx, ty)


def rotation(angle: float) -> Matrix:
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    return (cos_a, sin_a, -sin_a, cos_a, 0.0, 0.0)


def multiply_matrices(m1: Matrix, m2: Matrix) -> Matrix:
    a1, b1, c1, d1, e1, f1 = m1
    a2, b2, c2, d2, e2, f2 = m2
    return (
        a1 * a2 + c1 * b2,
        b1 * a2 + d1 * b2,
        a1 * c2 + c1 * d2,
        b1 * c2 + d1 * d2,
        a1 * e2 + c1 * f2 + e1,
        b1 * e2 + d1 * f2 + f1,
    )


def apply_matrix(matrix: Matrix, point: Point) -> Point:
    a, b, c, d, e, f = matrix
    x, y = point
    return (a * x + c * y + e, b * x + d * y + f)


def matrix_rotation(matrix: Matrix) -> float:
    """Angle of the matrix's x axis in radians."""
    a, b, _, _, _, _ = matrix
    return math.atan2(b, a)


def matrix_scale(matrix: Matrix) -> float:
    a, b, c, d, _, _ = matrix
    return math.sqrt(abs(a * d - b * c))


def output_unit_scale(unit: str, pixel_size_mm: float) -> float:
    unit_norm = unit.lower()
    if unit_norm == "mm":
        return pixel_size_mm
    if unit_norm == "inch":
        return pixel_size_mm / 25.4
    if unit_norm == "px":
        return 1.0
    raise ValueError(f"Unsupported output unit: {unit}")


def map_point(point: Point, scale: float, y_flip_ref: float | None) -> Point:
    x, y = point
    if y_flip_ref is None:
        return (x * scale, y * scale)
    return (x * scale, (y_flip_ref - y) * scale)
