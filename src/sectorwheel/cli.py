from __future__ import annotations

import argparse
import logging
import math
import sys
from pathlib import Path

from .dxf_writer import UNITS
from .models import DiagramConfig
from .output import DEFAULT_FORMATS, FORMATS, render_outputs

DEFAULT_SPRITE = Path("Sprites") / "sun.png"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Render a sector wheel diagram to PNG and PDF.")
    parser.add_argument(
        "--out-dir",
        default="resources",
        help="Directory receiving output.png/output.pdf (default: resources)",
    )
    parser.add_argument("--width", type=int, default=800, help="Canvas width in px (default: 800)")
    parser.add_argument("--height", type=int, default=800, help="Canvas height in px (default: 800)")
    parser.add_argument("--radius", type=float, default=300.0, help="Circle radius in px (default: 300)")
    parser.add_argument("--sectors", type=int, default=12, help="Number of sectors (default: 12)")
    parser.add_argument("--start-angle", type=float, default=0.0, help="Sweep start in radians")
    parser.add_argument("--end-angle", type=float, default=math.tau, help="Sweep end in radians (default: 2*pi)")
    parser.add_argument(
        "--text-rotation",
        type=float,
        default=math.pi / 2,
        help="Extra label rotation in radians (default: pi/2)",
    )
    parser.add_argument("--line-width", type=float, default=1.0, help="Separator line width (default: 1)")
    parser.add_argument("--font-family", default="Sans-Serif", help="Label font family")
    parser.add_argument("--font-size", type=float, default=32.0, help="Label font size (default: 32)")
    parser.add_argument(
        "--overlay",
        default=None,
        help="PNG drawn at the circle center (default: <out-dir>/Sprites/sun.png if present)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed for decorative lines")
    parser.add_argument(
        "--format",
        dest="formats",
        action="append",
        choices=FORMATS,
        help="Output format, repeatable (default: png and pdf)",
    )
    parser.add_argument(
        "--unit",
        choices=UNITS,
        default="px",
        help="DXF drawing unit (default: px)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    out_dir = Path(args.out_dir)
    overlay = args.overlay
    if overlay is None and (out_dir / DEFAULT_SPRITE).is_file():
        overlay = out_dir / DEFAULT_SPRITE

    try:
        config = DiagramConfig(
            width=args.width,
            height=args.height,
            radius=args.radius,
            sectors=args.sectors,
            start_angle=args.start_angle,
            end_angle=args.end_angle,
            line_width=args.line_width,
            text_rotation=args.text_rotation,
            font_family=args.font_family,
            font_size=args.font_size,
        ).with_overlay(overlay)
        render_outputs(
            config,
            out_dir,
            seed=args.seed,
            formats=args.formats or DEFAULT_FORMATS,
            dxf_unit=args.unit,
        )
    except Exception as exc:
        print(f"Rendering failed: {exc}", file=sys.stderr)
        return 1
    return 0
