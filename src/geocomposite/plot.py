"""Raster output through matplotlib."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, Sequence

from .geometry import RenderedFeature
from .models import ClosePath, LineTo, MoveTo, PathInstruction, Viewport
from .svg import SvgStyle

LOGGER = logging.getLogger("geocomposite.plot")

_DPI = 100


def _require_matplotlib() -> tuple[Any, Any, Any]:
    try:
        import matplotlib

        matplotlib.use("Agg", force=False)
        import matplotlib.pyplot as plt
        from matplotlib.patches import PathPatch
        from matplotlib.path import Path as MplPath
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("matplotlib is required for PNG output") from exc
    return (plt, MplPath, PathPatch)


def to_matplotlib_path(instructions: Iterable[PathInstruction]) -> Any:
    """Convert an instruction sequence to a `matplotlib.path.Path`.

    Each ClosePath closes back to the most recent MoveTo.
    """
    _, MplPath, _ = _require_matplotlib()
    vertices: list[tuple[float, float]] = []
    codes: list[int] = []
    start: tuple[float, float] | None = None
    for item in instructions:
        if isinstance(item, MoveTo):
            if not item.point.is_finite:
                continue
            start = item.point.as_tuple()
            vertices.append(start)
            codes.append(MplPath.MOVETO)
        elif isinstance(item, LineTo):
            if not item.point.is_finite or start is None:
                continue
            vertices.append(item.point.as_tuple())
            codes.append(MplPath.LINETO)
        elif isinstance(item, ClosePath):
            if start is None:
                continue
            vertices.append(start)
            codes.append(MplPath.CLOSEPOLY)
        else:
            raise TypeError(f"Unknown path instruction {item!r}")
    if not vertices:
        return MplPath(((0.0, 0.0),), (MplPath.MOVETO,))
    return MplPath(vertices, codes)


def render_png(
    path: Path,
    features: Sequence[RenderedFeature],
    viewport: Viewport,
    style: SvgStyle | None = None,
) -> Path:
    """Rasterise rendered features at one pixel per output unit."""
    plt, _, PathPatch = _require_matplotlib()
    style = style or SvgStyle()
    fig, ax = plt.subplots(figsize=(viewport.width / _DPI, viewport.height / _DPI), dpi=_DPI)
    try:
        fig.subplots_adjust(left=0.0, right=1.0, bottom=0.0, top=1.0)
        ax.set_axis_off()
        ax.set_xlim(viewport.x0, viewport.x1)
        # Screen space grows downward.
        ax.set_ylim(viewport.y1, viewport.y0)
        if style.background:
            fig.patch.set_facecolor(style.background)
        for feature in features:
            patch = PathPatch(
                to_matplotlib_path(feature.instructions),
                facecolor=style.fill,
                edgecolor=style.stroke,
                linewidth=style.stroke_width,
            )
            ax.add_patch(patch)
        path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(path, dpi=_DPI, facecolor=fig.get_facecolor())
    finally:
        plt.close(fig)
    LOGGER.debug("Wrote %s (%d features)", path, len(features))
    return path
