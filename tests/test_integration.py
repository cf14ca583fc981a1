import math
import random
from pathlib import Path

import cairo
import ezdxf
from ezdxf import units
import pytest
from ezdxf.entities.boundary_paths import ArcEdge, LineEdge

from sectorwheel import composer
from sectorwheel.models import DiagramConfig
from sectorwheel.output import record, render_outputs, write_dxf, write_png


def _config() -> DiagramConfig:
    return DiagramConfig(width=800, height=800, radius=300.0, sectors=12)


def test_render_outputs_writes_png_and_pdf(tmp_path: Path, sprite_png: Path) -> None:
    config = _config().with_overlay(sprite_png)
    written = render_outputs(config, tmp_path / "resources", seed=1234)

    assert [p.name for p in written] == ["output.png", "output.pdf"]
    png, pdf = written

    image = cairo.ImageSurface.create_from_png(str(png))
    assert (image.get_width(), image.get_height()) == (800, 800)
    # ARGB32 is stored native-endian; corner is opaque black background
    assert bytes(image.get_data()[:4]) in (b"\x00\x00\x00\xff", b"\xff\x00\x00\x00")

    assert pdf.read_bytes().startswith(b"%PDF")


def test_render_outputs_overwrites_existing_files(tmp_path: Path) -> None:
    target = tmp_path / "output.png"
    target.write_bytes(b"stale")
    render_outputs(_config(), tmp_path, seed=1, formats=["png"])
    assert target.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"


def test_render_outputs_rejects_unknown_format(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        render_outputs(_config(), tmp_path, seed=1, formats=["gif"])


def test_dxf_export(tmp_path: Path, sprite_png: Path) -> None:
    config = _config().with_overlay(sprite_png)
    dxf_file = write_dxf(config, tmp_path / "output.dxf", random.Random(77))
    assert dxf_file.exists()

    doc = ezdxf.readfile(str(dxf_file))
    msp = doc.modelspace()
    lines = msp.query("LINE")
    assert len(lines.query('*[layer=="SEPARATORS"]')) == 12
    assert len(lines.query('*[layer=="DECORATIONS"]')) == 3
    texts = msp.query("TEXT")
    assert sorted(int(t.dxf.text) for t in texts) == list(range(1, 13))
    assert len(msp.query("IMAGE")) == 1
    assert len(msp.query("HATCH")) == 2
    assert any(name.startswith("DASH_") for name in (lt.dxf.name for lt in doc.linetypes))


def test_dxf_flips_to_y_up(tmp_path: Path) -> None:
    config = DiagramConfig(width=200, height=100, radius=40.0, sectors=4, decorations=())
    dxf_file = write_dxf(config, tmp_path / "flip.dxf", random.Random(0))
    doc = ezdxf.readfile(str(dxf_file))
    separators = doc.modelspace().query('LINE[layer=="SEPARATORS"]')
    ends = sorted((round(line.dxf.end.x, 6), round(line.dxf.end.y, 6)) for line in separators)
    # device angle pi/2 points down (y=90); in DXF it must point down as well (y=10)
    assert ends == [(60.0, 50.0), (100.0, 10.0), (100.0, 90.0), (140.0, 50.0)]


def test_every_format_shares_decorative_angles(tmp_path: Path) -> None:
    config = _config()
    render_outputs(config, tmp_path, seed=99, formats=["png", "pdf", "dxf"])

    expected = record(config, random.Random(99)).entities_on("DECORATIONS")
    doc = ezdxf.readfile(str(tmp_path / "output.dxf"))
    decorations = doc.modelspace().query('LINE[layer=="DECORATIONS"]')
    got = [(round(line.dxf.end.x, 6), round(800 - line.dxf.end.y, 6)) for line in decorations]
    assert got == [(round(e.end[0], 6), round(e.end[1], 6)) for e in expected]


def test_png_and_pdf_passes_draw_the_same_decorations(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    chosen: list[list[float]] = []
    original = composer.decorative_angles

    def capture(config, rng):
        angles = original(config, rng)
        chosen.append(angles)
        return angles

    monkeypatch.setattr(composer, "decorative_angles", capture)
    render_outputs(_config(), tmp_path, seed=31337, formats=["png", "pdf"])

    assert len(chosen) == 2
    assert chosen[0] == chosen[1]


def test_png_is_reproducible_for_a_seed(tmp_path: Path) -> None:
    config = _config()
    render_outputs(config, tmp_path, seed=8, formats=["png"])
    again = write_png(config, tmp_path / "again.png", random.Random(8))
    assert (tmp_path / "output.png").read_bytes() == again.read_bytes()

    baseline = record(config, random.Random(8)).entities_on("DECORATIONS")
    other_seed = next(
        seed for seed in range(9, 100)
        if record(config, random.Random(seed)).entities_on("DECORATIONS") != baseline
    )
    different = write_png(config, tmp_path / "different.png", random.Random(other_seed))
    assert different.read_bytes() != again.read_bytes()


def test_dxf_partial_sweep_is_mirrored_arc_with_chord(tmp_path: Path) -> None:
    config = DiagramConfig(width=200, height=200, radius=50.0, sectors=3, start_angle=0.0, end_angle=math.pi / 2)
    dxf_file = write_dxf(config, tmp_path / "quarter.dxf", random.Random(0))
    msp = ezdxf.readfile(str(dxf_file)).modelspace()

    assert len(msp.query('CIRCLE[layer=="CIRCLE"]')) == 0
    arcs = msp.query('ARC[layer=="CIRCLE"]')
    assert len(arcs) == 1
    arc = arcs.first
    assert (arc.dxf.center.x, arc.dxf.center.y) == pytest.approx((100.0, 100.0))
    assert arc.dxf.radius == pytest.approx(50.0)
    # device quadrant 0..90 deg (Y down) becomes -90..0 deg in Y-up DXF
    start = math.radians(arc.dxf.start_angle)
    end = math.radians(arc.dxf.end_angle)
    assert (math.cos(start), math.sin(start)) == pytest.approx((0.0, -1.0), abs=1e-9)
    assert (math.cos(end), math.sin(end)) == pytest.approx((1.0, 0.0), abs=1e-9)

    hatch = msp.query('HATCH[layer=="CIRCLE"]').first
    edges = hatch.paths.paths[0].edges
    assert [type(edge) for edge in edges] == [ArcEdge, LineEdge]
    chord = edges[1]
    assert (chord.start.x, chord.start.y) == pytest.approx((150.0, 100.0))
    assert (chord.end.x, chord.end.y) == pytest.approx((100.0, 50.0))


def test_dxf_in_millimeters(tmp_path: Path) -> None:
    render_outputs(_config(), tmp_path, seed=4, formats=["dxf"], dxf_unit="mm")
    doc = ezdxf.readfile(str(tmp_path / "output.dxf"))
    assert doc.units == units.MM

    mm_per_px = 25.4 / 96.0
    msp = doc.modelspace()
    circle = msp.query('CIRCLE[layer=="CIRCLE"]').first
    assert circle.dxf.radius == pytest.approx(300.0 * mm_per_px)
    ends = [(line.dxf.end.x, line.dxf.end.y) for line in msp.query('LINE[layer=="SEPARATORS"]')]
    assert ends[0] == pytest.approx((700.0 * mm_per_px, 400.0 * mm_per_px))


def test_render_outputs_rejects_unknown_unit(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        render_outputs(_config(), tmp_path, seed=1, formats=["dxf"], dxf_unit="furlong")
