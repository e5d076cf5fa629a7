"""CLI entrypoint for geocomposite."""

from __future__ import annotations

import argparse
import logging
import math
from pathlib import Path
from typing import Sequence

from .composite import CompositeProjection, regime_sweep
from .config import AppConfig, load_config
from .geometry import GeometryDispatcher, RenderReport, format_render_lines
from .io_geo import load_geometry
from .models import Coordinate
from .plot import render_png
from .svg import write_svg
from .util import inclusive_steps, setup_logging, write_json

LOGGER = logging.getLogger("geocomposite.cli")


def _positive_float(text: str) -> float:
    try:
        value = float(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected a number, got {text!r}") from exc
    if not math.isfinite(value) or value <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive number, got {text!r}")
    return value


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="geocomposite",
        description="Adaptive composite map projection renderer.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common(p: argparse.ArgumentParser) -> None:
        p.add_argument("--config", default=None, help="Path to YAML config (defaults built in).")
        p.add_argument("--verbose", action="store_true", help="Enable debug logs.")

    def add_view(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "--scale",
            type=_positive_float,
            default=None,
            help="Zoom: pixel scale over half the viewport's shorter side.",
        )
        p.add_argument(
            "--origin",
            nargs=2,
            type=float,
            metavar=("LON", "LAT"),
            default=None,
            help="View origin in degrees.",
        )

    render_p = subparsers.add_parser("render", help="Render a geometry file to SVG or PNG.")
    add_common(render_p)
    add_view(render_p)
    render_p.add_argument("input", help="GeoJSON file, or any format GeoPandas reads.")
    render_p.add_argument("--output", required=True, help="Output path ending in .svg or .png.")

    regimes_p = subparsers.add_parser("regimes", help="List the projection regime across zoom levels.")
    add_common(regimes_p)
    regimes_p.add_argument("--lat", type=float, default=0.0, help="Origin latitude in degrees.")
    regimes_p.add_argument("--lon", type=float, default=0.0, help="Origin longitude in degrees.")
    regimes_p.add_argument("--start", type=_positive_float, default=1.0)
    regimes_p.add_argument("--stop", type=_positive_float, default=20.0)
    regimes_p.add_argument("--step", type=_positive_float, default=0.5)
    regimes_p.add_argument("--json", default=None, help="Also write the sweep as JSON.")

    project_p = subparsers.add_parser("project", help="Project one position with the composite.")
    add_common(project_p)
    add_view(project_p)
    project_p.add_argument("lon", type=float)
    project_p.add_argument("lat", type=float)

    return parser


def _load_and_setup(args: argparse.Namespace) -> AppConfig:
    cfg = load_config(args.config) if args.config else AppConfig.defaults()
    setup_logging(cfg.output.log_file, verbose=args.verbose)
    return cfg


def _composite(
    cfg: AppConfig,
    *,
    scale: float | None,
    origin: Sequence[float] | None,
) -> CompositeProjection:
    viewport = cfg.viewport.viewport
    zoom = scale if scale is not None else cfg.projection.scale
    center = Coordinate.of(origin) if origin is not None else cfg.projection.origin
    return CompositeProjection(viewport, origin=center, scale=zoom * viewport.smaller_dimension)


def _run_render(
    cfg: AppConfig,
    *,
    input_path: Path,
    output_path: Path,
    scale: float | None,
    origin: Sequence[float] | None,
) -> int:
    suffix = output_path.suffix.lower()
    if suffix not in {".svg", ".png"}:
        LOGGER.error("Unsupported output format %r; use .svg or .png", suffix or str(output_path))
        return 1
    try:
        geometry = load_geometry(input_path)
    except (OSError, ValueError, RuntimeError) as exc:
        LOGGER.error("Could not load %s: %s", input_path, exc)
        return 1

    projection = _composite(cfg, scale=scale, origin=origin)
    LOGGER.info("Rendering %s with %s at zoom %.3f", input_path.name, projection.projection_name(), projection.zoom)
    dispatcher = GeometryDispatcher(projection, **cfg.renderer.options())
    report = RenderReport()
    features = dispatcher.render_features(geometry, report)

    viewport = cfg.viewport.viewport
    try:
        if suffix == ".svg":
            write_svg(output_path, features, viewport, cfg.output.style, precision=cfg.output.precision)
        else:
            render_png(output_path, features, viewport, cfg.output.style)
    except (OSError, RuntimeError) as exc:
        LOGGER.error("Could not write %s: %s", output_path, exc)
        return 1

    for line in format_render_lines(report):
        LOGGER.info(line)
    LOGGER.info("Wrote %s", output_path)
    return 0 if report.ok else 1


def _run_regimes(
    cfg: AppConfig,
    *,
    origin: tuple[float, float],
    start: float,
    stop: float,
    step: float,
    json_path: Path | None,
) -> int:
    try:
        zooms = inclusive_steps(start, stop, step)
    except ValueError as exc:
        LOGGER.error("%s", exc)
        return 1
    samples = regime_sweep(zooms, origin=origin, viewport=cfg.viewport.viewport)
    for sample in samples:
        print(f"{sample.zoom:8.3f}  {sample.regime.label}")
    if json_path is not None:
        payload = {
            "origin": list(origin),
            "viewport": list(cfg.viewport.viewport.as_tuple()),
            "samples": [{"zoom": sample.zoom, "regime": sample.regime.label} for sample in samples],
        }
        write_json(json_path, payload)
        LOGGER.info("Wrote %s", json_path)
    return 0


def _run_project(
    cfg: AppConfig,
    *,
    lon: float,
    lat: float,
    scale: float | None,
    origin: Sequence[float] | None,
) -> int:
    if not (math.isfinite(lon) and math.isfinite(lat)):
        LOGGER.error("Position must be finite, got (%s, %s)", lon, lat)
        return 1
    projection = _composite(cfg, scale=scale, origin=origin)
    point = projection.forward((lon, lat))
    print(f"regime: {projection.projection_name()}")
    print(f"zoom: {projection.zoom:g}")
    print(f"x: {point.x:.6f}")
    print(f"y: {point.y:.6f}")
    print(f"wrapped: {str(point.wrapped).lower()}")
    return 0 if point.is_finite else 1


def _dispatch(args: argparse.Namespace) -> int:
    try:
        cfg = _load_and_setup(args)
    except (OSError, ValueError) as exc:
        logging.basicConfig(level=logging.INFO)
        LOGGER.error("Invalid configuration: %s", exc)
        return 1
    command = str(args.command)
    if command == "render":
        return _run_render(
            cfg,
            input_path=Path(args.input),
            output_path=Path(args.output),
            scale=args.scale,
            origin=args.origin,
        )
    if command == "regimes":
        return _run_regimes(
            cfg,
            origin=(float(args.lon), float(args.lat)),
            start=float(args.start),
            stop=float(args.stop),
            step=float(args.step),
            json_path=Path(args.json) if args.json else None,
        )
    if command == "project":
        return _run_project(cfg, lon=args.lon, lat=args.lat, scale=args.scale, origin=args.origin)
    raise ValueError(f"Unknown command: {command}")


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    return _dispatch(args)


if __name__ == "__main__":
    raise SystemExit(main())
