"""Adaptive path rendering: geographic polylines to path instructions.

Each source edge becomes a small binary tree. An edge whose projected length
is below the pixel tolerance is a leaf; longer edges are split at their
geographic midpoint, and when one half is much longer than the other only
that half keeps splitting. Sample points therefore concentrate where the
projection bends the edge and straight stretches stay cheap.

Edges whose endpoints fall on different sheets of the projection (the
`wrapped` flag differs) cross the antimeridian; the crossing is located by
bisection and the path is broken there with a MoveTo. A tilted frame can also
cut an edge without changing the flag; such an edge never converges, and the
leaf left at the depth cap becomes the break.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterator, Sequence

from .constants import RENDERER
from .models import ClosePath, Coordinate, LineTo, MoveTo, PathInstruction, ProjectedPoint
from .projection import Projection

_LOGGER = logging.getLogger("geocomposite.path")


class DegenerateGeometry(ValueError):
    """Raised for lines with fewer than two vertices or rings with fewer than three."""


@dataclass(slots=True)
class RenderStats:
    edges: int = 0
    leaves: int = 0
    wraps: int = 0
    suppressed: int = 0
    max_depth: int = 0

    def merge(self, other: RenderStats) -> None:
        self.edges += other.edges
        self.leaves += other.leaves
        self.wraps += other.wraps
        self.suppressed += other.suppressed
        self.max_depth = max(self.max_depth, other.max_depth)

    def to_dict(self) -> dict[str, int]:
        return {
            "edges": self.edges,
            "leaves": self.leaves,
            "wraps": self.wraps,
            "suppressed": self.suppressed,
            "max_depth": self.max_depth,
        }


@dataclass(slots=True)
class _Subdivision:
    """Node of an edge's subdivision tree; leaves draw to (or jump to) `end`."""

    end: ProjectedPoint
    depth: int
    children: tuple[_Subdivision, ...] = field(default_factory=tuple)
    breaks: bool = False

    def emit(self, out: list[PathInstruction]) -> None:
        if not self.children:
            out.append(MoveTo(self.end) if self.breaks else LineTo(self.end))
            return
        for child in self.children:
            child.emit(out)

    def leaves(self) -> Iterator[_Subdivision]:
        stack = [self]
        while stack:
            node = stack.pop()
            if node.children:
                stack.extend(reversed(node.children))
            else:
                yield node


def _midpoint(a: Coordinate, b: Coordinate) -> Coordinate:
    return Coordinate(lon=(a.lon + b.lon) / 2.0, lat=(a.lat + b.lat) / 2.0)


def unwrap_longitudes(coordinates: Sequence[Coordinate]) -> list[Coordinate]:
    """Shift longitudes by whole turns so every step is at most 180 degrees."""
    if not coordinates:
        return []
    out = [coordinates[0]]
    prev = coordinates[0].lon
    for coord in coordinates[1:]:
        if not (math.isfinite(coord.lon) and math.isfinite(prev)):
            out.append(coord)
            if math.isfinite(coord.lon):
                prev = coord.lon
            continue
        lon = prev + ((coord.lon - prev + 180.0) % 360.0) - 180.0
        out.append(coord if lon == coord.lon else Coordinate(lon=lon, lat=coord.lat))
        prev = lon
    return out


class PathRenderer:
    """Turn geographic polylines and rings into MoveTo/LineTo/ClosePath sequences.

    Holds no state between calls apart from `stats`, which describes the most
    recent `render` call.
    """

    def __init__(
        self,
        projection: Projection,
        *,
        tolerance_px: float = RENDERER.tolerance_px,
        max_depth: int = RENDERER.max_depth,
        magnitude_margin: float = RENDERER.magnitude_margin,
    ) -> None:
        if not math.isfinite(tolerance_px) or tolerance_px <= 0:
            raise ValueError(f"tolerance_px must be positive, got {tolerance_px!r}")
        if isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth < 0:
            raise ValueError(f"max_depth must be a non-negative integer, got {max_depth!r}")
        if not math.isfinite(magnitude_margin) or magnitude_margin <= 1.0:
            raise ValueError(f"magnitude_margin must be greater than 1, got {magnitude_margin!r}")
        self.projection = projection
        self.tolerance_px = float(tolerance_px)
        self.max_depth = max_depth
        self.magnitude_margin = float(magnitude_margin)
        self.stats = RenderStats()

    def render(
        self,
        coordinates: Sequence[Coordinate | Sequence[float]],
        closed: bool = False,
    ) -> list[PathInstruction]:
        coords = [Coordinate.of(item) for item in coordinates]
        minimum = 3 if closed else 2
        if len(coords) < minimum:
            kind = "ring" if closed else "line"
            raise DegenerateGeometry(f"A {kind} needs at least {minimum} vertices, got {len(coords)}")

        self.stats = RenderStats()
        track = unwrap_longitudes(coords)
        projected = [self.projection.forward(coord) for coord in track]
        out: list[PathInstruction] = [MoveTo(projected[0])]

        if closed and not self.projection.validate_path(coords):
            _LOGGER.debug("Ring of %d vertices falls in a distortion zone; suppressed.", len(coords))
            self.stats.suppressed += 1
            out.append(ClosePath())
            return out

        for idx in range(1, len(track)):
            self.stats.edges += 1
            tree = self._edge(track[idx - 1], track[idx], projected[idx - 1], projected[idx], 0)
            tree.emit(out)
        if closed:
            out.append(ClosePath())
        return out

    def _leaf(self, end: ProjectedPoint, depth: int, *, breaks: bool = False) -> _Subdivision:
        self.stats.leaves += 1
        self.stats.max_depth = max(self.stats.max_depth, depth)
        return _Subdivision(end=end, depth=depth, breaks=breaks)

    def _edge(
        self,
        a: Coordinate,
        b: Coordinate,
        pa: ProjectedPoint,
        pb: ProjectedPoint,
        depth: int,
    ) -> _Subdivision:
        crosses = pa.wrapped != pb.wrapped
        if depth >= self.max_depth:
            if crosses or not self.projection.should_interpolate():
                return self._leaf(pb, depth, breaks=crosses)
            return self._capped(a, b, pa, pb, depth)
        if crosses:
            return self._split_at_wrap(a, b, pa, pb, depth)
        if not self.projection.should_interpolate():
            return self._leaf(pb, depth)
        return self._subdivide(a, b, pa, pb, depth)

    def _split_at_wrap(
        self,
        a: Coordinate,
        b: Coordinate,
        pa: ProjectedPoint,
        pb: ProjectedPoint,
        depth: int,
    ) -> _Subdivision:
        self.stats.wraps += 1
        lo, hi, plo, phi = a, b, pa, pb
        for _ in range(self.max_depth):
            mid = _midpoint(lo, hi)
            pmid = self.projection.forward(mid)
            if pmid.wrapped == plo.wrapped:
                lo, plo = mid, pmid
            else:
                hi, phi = mid, pmid
        before = self._edge(a, lo, pa, plo, depth + 1)
        jump = self._leaf(phi, depth + 1, breaks=True)
        after = self._edge(hi, b, phi, pb, depth + 1)
        return _Subdivision(end=pb, depth=depth, children=(before, jump, after))

    def _subdivide(
        self,
        a: Coordinate,
        b: Coordinate,
        pa: ProjectedPoint,
        pb: ProjectedPoint,
        depth: int,
    ) -> _Subdivision:
        self.stats.max_depth = max(self.stats.max_depth, depth)
        if depth >= self.max_depth:
            return self._capped(a, b, pa, pb, depth)
        # NaN distances also end here: a distorted leaf beats an aborted render.
        if not pa.distance_to(pb) >= self.tolerance_px:
            return self._leaf(pb, depth)

        mid = _midpoint(a, b)
        pmid = self.projection.forward(mid)
        if pmid.wrapped != pa.wrapped:
            # Same sheet at both ends but not in the middle: two crossings.
            children = (
                self._edge(a, mid, pa, pmid, depth + 1),
                self._edge(mid, b, pmid, pb, depth + 1),
            )
            return _Subdivision(end=pb, depth=depth, children=children)

        first = pa.distance_to(pmid)
        second = pmid.distance_to(pb)
        if first > 0:
            ratio = second / first
        else:
            ratio = math.inf if second > 0 else 1.0

        if ratio > self.magnitude_margin:
            children = (self._leaf(pmid, depth + 1), self._subdivide(mid, b, pmid, pb, depth + 1))
        elif ratio < 1.0 / self.magnitude_margin:
            children = (self._subdivide(a, mid, pa, pmid, depth + 1), self._leaf(pb, depth + 1))
        else:
            children = (
                self._subdivide(a, mid, pa, pmid, depth + 1),
                self._subdivide(mid, b, pmid, pb, depth + 1),
            )
        return _Subdivision(end=pb, depth=depth, children=children)

    def _capped(
        self,
        a: Coordinate,
        b: Coordinate,
        pa: ProjectedPoint,
        pb: ProjectedPoint,
        depth: int,
    ) -> _Subdivision:
        """Leaf at the depth cap.

        An edge still longer than the tolerance here has not converged. When
        its midpoint also sits almost entirely on one side, the edge straddles
        a cut of the frame (for instance the back of a tilted globe) that the
        wrap flag did not see, so it becomes a break instead of a line across
        the map.
        """
        if not pa.distance_to(pb) >= self.tolerance_px:
            return self._leaf(pb, depth)
        pmid = self.projection.forward(_midpoint(a, b))
        first = pa.distance_to(pmid)
        second = pmid.distance_to(pb)
        if max(first, second) > self.magnitude_margin * min(first, second):
            self.stats.wraps += 1
            _LOGGER.debug("Edge still %.1f px long at depth %d; breaking the path.", pa.distance_to(pb), depth)
            return self._leaf(pb, depth, breaks=True)
        return self._leaf(pb, depth)


def render_path(
    projection: Projection,
    coordinates: Sequence[Coordinate | Sequence[float]],
    closed: bool = False,
    **options: Any,
) -> list[PathInstruction]:
    """One-shot convenience wrapper around `PathRenderer.render`."""
    return PathRenderer(projection, **options).render(coordinates, closed)
