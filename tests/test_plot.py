from __future__ import annotations

from pathlib import Path

import pytest

pytest.importorskip("matplotlib")

from geocomposite.geometry import RenderedFeature  # noqa: E402
from geocomposite.models import ClosePath, LineTo, MoveTo, ProjectedPoint, Viewport  # noqa: E402
from geocomposite.plot import render_png, to_matplotlib_path  # noqa: E402


def test_instructions_map_to_path_codes() -> None:
    from matplotlib.path import Path as MplPath

    path = to_matplotlib_path(
        [
            MoveTo(ProjectedPoint(0, 0)),
            LineTo(ProjectedPoint(10, 0)),
            LineTo(ProjectedPoint(10, 10)),
            ClosePath(),
        ]
    )
    assert list(path.codes) == [MplPath.MOVETO, MplPath.LINETO, MplPath.LINETO, MplPath.CLOSEPOLY]
    assert tuple(path.vertices[-1]) == (0.0, 0.0)


def test_render_png_writes_a_file(tmp_path: Path) -> None:
    feature = RenderedFeature(
        (MoveTo(ProjectedPoint(10, 10)), LineTo(ProjectedPoint(50, 10)), LineTo(ProjectedPoint(30, 40)), ClosePath())
    )
    out = render_png(tmp_path / "map.png", [feature], Viewport(0, 0, 64, 48))
    assert out.exists()
    assert out.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"
