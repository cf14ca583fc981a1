from __future__ import annotations

import math
from pathlib import Path

import ezdxf
from ezdxf import colors, units
from ezdxf.lldxf.const import VALID_DXF_LINEWEIGHTS

from .geometry import map_point, output_unit_scale
from .models import Color, DashPattern, DiskEntity, Entity, ImageEntity, LineEntity, RectEntity, TextEntity

_DXF_UNIT_MAP = {
    "mm": units.MM,
    "inch": units.IN,
    "px": 0,
}

UNITS = tuple(_DXF_UNIT_MAP)
PIXEL_SIZE_MM = 25.4 / 96.0


def write_dxf(
    path: str | Path,
    entities: list[Entity],
    *,
    canvas_height: float,
    unit: str = "px",
    pixel_size_mm: float = PIXEL_SIZE_MM,
) -> None:
    """Write entities recorded in device space (Y down) to a Y-up DXF drawing."""
    scale = output_unit_scale(unit, pixel_size_mm)
    doc = ezdxf.new("R2018")
    doc.units = _DXF_UNIT_MAP.get(unit.lower(), 0)
    msp = doc.modelspace()

    lt_map = _register_dash_linetypes(doc, entities, scale)

    def pt(p: tuple[float, float]) -> tuple[float, float]:
        return map_point(p, scale=scale, y_flip_ref=canvas_height)

    for entity in entities:
        _ensure_layer(doc, entity.layer)

        if isinstance(entity, RectEntity):
            x, y = entity.origin
            corners = [
                pt((x, y)),
                pt((x + entity.width, y)),
                pt((x + entity.width, y + entity.height)),
                pt((x, y + entity.height)),
            ]
            hatch = msp.add_hatch(dxfattribs=_color_attribs(entity.color, entity.layer))
            hatch.paths.add_polyline_path(corners, is_closed=True)
            continue

        if isinstance(entity, DiskEntity):
            attribs = _color_attribs(entity.color, entity.layer)
            center = pt(entity.center)
            radius = entity.radius * scale
            # Y flip mirrors the sweep: device [a0, a1] clockwise becomes [-a1, -a0] counter-clockwise
            start_deg = math.degrees(-entity.end_angle)
            end_deg = math.degrees(-entity.start_angle)
            hatch = msp.add_hatch(dxfattribs=attribs)
            edges = hatch.paths.add_edge_path()
            if _is_full_turn(entity.start_angle, entity.end_angle):
                edges.add_arc(center, radius, 0.0, 360.0)
                msp.add_circle(center, radius, dxfattribs=attribs)
            else:
                edges.add_arc(center, radius, start_deg, end_deg)
                chord_start = _polar(center, radius, end_deg)
                chord_end = _polar(center, radius, start_deg)
                edges.add_line(chord_start, chord_end)
                msp.add_arc(center=center, radius=radius, start_angle=start_deg, end_angle=end_deg, dxfattribs=attribs)
            continue

        if isinstance(entity, LineEntity):
            attribs = _color_attribs(entity.color, entity.layer)
            attribs["lineweight"] = _lineweight(entity.width * pixel_size_mm)
            if entity.dash_pattern and entity.dash_pattern in lt_map:
                attribs["linetype"] = lt_map[entity.dash_pattern]
            msp.add_line(pt(entity.start), pt(entity.end), dxfattribs=attribs)
            continue

        if isinstance(entity, TextEntity):
            attribs = _color_attribs(entity.color, entity.layer)
            attribs.update(
                {
                    "insert": pt(entity.insert),
                    "height": max(entity.height * scale, 1e-6),
                    "rotation": -math.degrees(entity.rotation),
                }
            )
            msp.add_text(entity.text, dxfattribs=attribs)
            continue

        if isinstance(entity, ImageEntity):
            if entity.path is None:
                continue
            x, y = entity.origin
            image_def = doc.add_image_def(filename=str(entity.path), size_in_pixel=(entity.width, entity.height))
            msp.add_image(
                image_def=image_def,
                insert=pt((x, y + entity.height)),
                size_in_units=(entity.width * scale, entity.height * scale),
                rotation=0,
                dxfattribs={"layer": entity.layer},
            )

    doc.saveas(str(path))


def _color_attribs(color: Color, layer: str) -> dict:
    r, g, b, a = color
    attribs = {
        "layer": layer,
        "true_color": colors.rgb2int((round(r * 255), round(g * 255), round(b * 255))),
    }
    if a < 1.0:
        attribs["transparency"] = colors.float2transparency(1.0 - a)
    return attribs


def _lineweight(width_mm: float) -> int:
    target = width_mm * 100.0
    return min((w for w in VALID_DXF_LINEWEIGHTS if w > 0), key=lambda w: abs(w - target))


def _is_full_turn(start: float, end: float) -> bool:
    return end - start >= math.tau - 1e-9


def _polar(center: tuple[float, float], radius: float, angle_deg: float) -> tuple[float, float]:
    angle = math.radians(angle_deg)
    return (center[0] + math.cos(angle) * radius, center[1] + math.sin(angle) * radius)


def _register_dash_linetypes(
    doc: ezdxf.document.Drawing, entities: list[Entity], scale: float,
) -> dict[tuple[float, ...], str]:
    patterns: set[tuple[float, ...]] = set()
    for e in entities:
        dp: DashPattern = getattr(e, "dash_pattern", None)
        if dp:
            patterns.add(dp)

    lt_map: dict[tuple[float, ...], str] = {}
    for pattern in patterns:
        name = _linetype_name(pattern)
        scaled = [v * scale for v in pattern]
        # DXF pattern: [total_length, dash, -gap, dash, -gap, ...]
        dxf_pattern: list[float] = [sum(scaled)]
        for i, v in enumerate(scaled):
            dxf_pattern.append(v if i % 2 == 0 else -v)
        try:
            doc.linetypes.add(name, pattern=dxf_pattern)
        except ezdxf.DXFTableEntryError:
            pass  # already registered
        lt_map[pattern] = name

    return lt_map


def _linetype_name(pattern: tuple[float, ...]) -> str:
    parts = []
    for v in pattern:
        s = f"{v:.2f}".replace(".", "p").rstrip("0").rstrip("p")
        parts.append(s)
    return "DASH_" + "_".join(parts)


def _ensure_layer(doc: ezdxf.document.Drawing, layer_name: str) -> None:
    if layer_name in doc.layers:
        return
    doc.layers.new(name=layer_name)
