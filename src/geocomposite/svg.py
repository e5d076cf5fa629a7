"""SVG path-data formatting and document output."""

from __future__ import annotations

import math
from dataclasses import dataclass
from html import escape
from pathlib import Path
from typing import Iterable, Sequence

from .geometry import RenderedFeature
from .models import ClosePath, LineTo, MoveTo, PathInstruction, Viewport


@dataclass(frozen=True, slots=True)
class SvgStyle:
    stroke: str = "#333333"
    fill: str = "none"
    stroke_width: float = 1.0
    background: str | None = "#ffffff"


def _number(value: float, precision: int) -> str:
    if not math.isfinite(value):
        raise ValueError(f"Cannot write non-finite coordinate {value!r} to SVG")
    text = f"{value:.{precision}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        text = "0"
    return text


def format_path_data(instructions: Iterable[PathInstruction], precision: int = 3) -> str:
    """SVG `d` attribute for an instruction sequence, e.g. ``"M 1,2 L 3,4 Z"``.

    Consecutive MoveTos collapse to the last one; a lone MoveTo draws nothing
    but is kept, as is the ClosePath that follows it.
    """
    if precision < 0:
        raise ValueError(f"precision must be non-negative, got {precision!r}")
    parts: list[str] = []
    for item in instructions:
        if isinstance(item, ClosePath):
            parts.append("Z")
            continue
        if isinstance(item, MoveTo):
            command = "M"
        elif isinstance(item, LineTo):
            command = "L"
        else:
            raise TypeError(f"Unknown path instruction {item!r}")
        point = item.point
        if not point.is_finite:
            continue
        token = f"{command} {_number(point.x, precision)},{_number(point.y, precision)}"
        if command == "M" and parts and parts[-1].startswith("M "):
            parts[-1] = token
        else:
            parts.append(token)
    return " ".join(parts)


def _feature_attrs(feature: RenderedFeature) -> str:
    attrs: list[str] = []
    if feature.feature_id is not None:
        attrs.append(f" id='{escape(feature.feature_id)}'")
    name = feature.properties.get("name")
    if isinstance(name, str) and name:
        attrs.append(f" data-name='{escape(name)}'")
    return "".join(attrs)


def build_svg(
    features: Sequence[RenderedFeature],
    viewport: Viewport,
    style: SvgStyle | None = None,
    *,
    precision: int = 3,
) -> str:
    style = style or SvgStyle()
    x0, y0, _, _ = viewport.as_tuple()
    width = _number(viewport.width, precision)
    height = _number(viewport.height, precision)
    lines = [
        "<?xml version='1.0' encoding='utf-8'?>",
        (
            "<svg xmlns='http://www.w3.org/2000/svg' "
            f"width='{width}' height='{height}' "
            f"viewBox='{_number(x0, precision)} {_number(y0, precision)} {width} {height}'>"
        ),
    ]
    if style.background:
        lines.append(
            f"  <rect x='{_number(x0, precision)}' y='{_number(y0, precision)}' "
            f"width='{width}' height='{height}' fill='{escape(style.background)}'/>"
        )
    lines.append(
        f"  <g fill='{escape(style.fill)}' stroke='{escape(style.stroke)}' "
        f"stroke-width='{_number(style.stroke_width, precision)}' fill-rule='evenodd'>"
    )
    for feature in features:
        data = format_path_data(feature.instructions, precision)
        if not data:
            continue
        lines.append(f"    <path{_feature_attrs(feature)} d='{data}'/>")
    lines.append("  </g>")
    lines.append("</svg>")
    return "\n".join(lines) + "\n"


def write_svg(
    path: Path,
    features: Sequence[RenderedFeature],
    viewport: Viewport,
    style: SvgStyle | None = None,
    *,
    precision: int = 3,
) -> Path:
    """Write one `<path>` per rendered feature into a standalone SVG file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(build_svg(features, viewport, style, precision=precision), encoding="utf-8")
    return path
