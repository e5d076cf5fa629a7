"""Typed configuration loader for `config.yaml`."""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, cast

import yaml

from .constants import DEFAULT_VIEWPORT, RENDERER
from .models import Coordinate, Viewport
from .svg import SvgStyle


def _mapping(value: Any, field_name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"Expected mapping for '{field_name}'")
    return cast(Mapping[str, Any], value)


def _str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Expected non-empty string for '{field_name}'")
    return value.strip()


def _int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Expected integer for '{field_name}'")
    return value


def _float(value: Any, field_name: str) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value):
        return float(value)
    raise ValueError(f"Expected finite number for '{field_name}'")


def _positive(value: Any, field_name: str) -> float:
    out = _float(value, field_name)
    if out <= 0:
        raise ValueError(f"Expected positive number for '{field_name}'")
    return out


def _pair(value: Any, field_name: str) -> tuple[float, float]:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ValueError(f"Expected [lon, lat] list for '{field_name}'")
    return (_float(value[0], f"{field_name}[0]"), _float(value[1], f"{field_name}[1]"))


def _path_from_cfg(value: Any, field_name: str, root_dir: Path) -> Path:
    raw = _str(value, field_name)
    p = Path(raw)
    return p if p.is_absolute() else root_dir / p


@dataclass(frozen=True, slots=True)
class ViewportConfig:
    width: float = DEFAULT_VIEWPORT[2] - DEFAULT_VIEWPORT[0]
    height: float = DEFAULT_VIEWPORT[3] - DEFAULT_VIEWPORT[1]
    x0: float = DEFAULT_VIEWPORT[0]
    y0: float = DEFAULT_VIEWPORT[1]

    @property
    def viewport(self) -> Viewport:
        return Viewport(self.x0, self.y0, self.x0 + self.width, self.y0 + self.height)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> ViewportConfig:
        defaults = cls()
        return cls(
            width=_positive(raw.get("width", defaults.width), "viewport.width"),
            height=_positive(raw.get("height", defaults.height), "viewport.height"),
            x0=_float(raw.get("x0", defaults.x0), "viewport.x0"),
            y0=_float(raw.get("y0", defaults.y0), "viewport.y0"),
        )


@dataclass(frozen=True, slots=True)
class ProjectionConfig:
    """View state; `scale` is the zoom, i.e. pixels per half of the shorter viewport side."""

    origin: Coordinate = Coordinate(0.0, 0.0)
    scale: float = 1.0

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> ProjectionConfig:
        origin = raw.get("origin")
        lon, lat = _pair(origin, "projection.origin") if origin is not None else (0.0, 0.0)
        if abs(lat) > 90.0:
            raise ValueError("Expected latitude within [-90, 90] for 'projection.origin[1]'")
        return cls(
            origin=Coordinate(lon, lat),
            scale=_positive(raw.get("scale", 1.0), "projection.scale"),
        )


@dataclass(frozen=True, slots=True)
class RendererConfig:
    tolerance_px: float = RENDERER.tolerance_px
    max_depth: int = RENDERER.max_depth
    magnitude_margin: float = RENDERER.magnitude_margin
    point_radius_px: float = RENDERER.point_radius_px

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> RendererConfig:
        defaults = cls()
        max_depth = _int(raw.get("max_depth", defaults.max_depth), "renderer.max_depth")
        if max_depth < 0:
            raise ValueError("Expected non-negative integer for 'renderer.max_depth'")
        margin = _float(raw.get("magnitude_margin", defaults.magnitude_margin), "renderer.magnitude_margin")
        if margin <= 1.0:
            raise ValueError("Expected number above 1 for 'renderer.magnitude_margin'")
        radius = _float(raw.get("point_radius_px", defaults.point_radius_px), "renderer.point_radius_px")
        if radius < 0:
            raise ValueError("Expected non-negative number for 'renderer.point_radius_px'")
        return cls(
            tolerance_px=_positive(raw.get("tolerance_px", defaults.tolerance_px), "renderer.tolerance_px"),
            max_depth=max_depth,
            magnitude_margin=margin,
            point_radius_px=radius,
        )

    def options(self) -> dict[str, Any]:
        return {
            "tolerance_px": self.tolerance_px,
            "max_depth": self.max_depth,
            "magnitude_margin": self.magnitude_margin,
            "point_radius_px": self.point_radius_px,
        }


@dataclass(frozen=True, slots=True)
class OutputConfig:
    precision: int = 3
    style: SvgStyle = SvgStyle()
    log_file: Path | None = None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], root_dir: Path) -> OutputConfig:
        defaults = SvgStyle()
        precision = _int(raw.get("precision", 3), "output.precision")
        if precision < 0:
            raise ValueError("Expected non-negative integer for 'output.precision'")
        background = raw.get("background", defaults.background)
        log_file = raw.get("log_file")
        return cls(
            precision=precision,
            style=SvgStyle(
                stroke=_str(raw.get("stroke", defaults.stroke), "output.stroke"),
                fill=_str(raw.get("fill", defaults.fill), "output.fill"),
                stroke_width=_positive(raw.get("stroke_width", defaults.stroke_width), "output.stroke_width"),
                background=None if background is None else _str(background, "output.background"),
            ),
            log_file=None if log_file is None else _path_from_cfg(log_file, "output.log_file", root_dir),
        )


@dataclass(frozen=True, slots=True)
class AppConfig:
    source_path: Path | None
    viewport: ViewportConfig
    projection: ProjectionConfig
    renderer: RendererConfig
    output: OutputConfig

    @classmethod
    def defaults(cls) -> AppConfig:
        return cls(
            source_path=None,
            viewport=ViewportConfig(),
            projection=ProjectionConfig(),
            renderer=RendererConfig(),
            output=OutputConfig(),
        )

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], source_path: Path) -> AppConfig:
        root_dir = source_path.parent.resolve()
        return cls(
            source_path=source_path.resolve(),
            viewport=ViewportConfig.from_mapping(_mapping(raw.get("viewport"), "viewport")),
            projection=ProjectionConfig.from_mapping(_mapping(raw.get("projection"), "projection")),
            renderer=RendererConfig.from_mapping(_mapping(raw.get("renderer"), "renderer")),
            output=OutputConfig.from_mapping(_mapping(raw.get("output"), "output"), root_dir),
        )


def load_config(path: str | Path) -> AppConfig:
    """Load and validate the YAML config file into typed settings."""
    cfg_path = Path(path).resolve()
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise ValueError("Top-level config must be a YAML mapping")
    return AppConfig.from_mapping(cast(Mapping[str, Any], raw), cfg_path)
