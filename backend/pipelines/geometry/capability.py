"""
Polygon Geometry Capability
The boolean-geometry operations merge and split rely on, behind a small
protocol so the engine does not depend on one library's API shape.

Shapes handed out by a capability are opaque to the engine; it only passes
them back into the same capability. Rings cross the boundary as open point
tuples (first point not repeated).
"""
from __future__ import annotations

import logging
from typing import Any, List, Protocol, Sequence, Tuple

from shapely import make_valid
from shapely.geometry import GeometryCollection, MultiPolygon, Polygon
from shapely.ops import unary_union

from pipelines.parcels.models import Point, Ring

logger = logging.getLogger(__name__)

# (exterior ring, interior rings) of one polygon part
PolygonPart = Tuple[Ring, Tuple[Ring, ...]]


def close_ring(ring: Sequence[Point]) -> List[Point]:
    """Closed form for boolean-geometry libraries: first point repeated at the end."""
    coords = [tuple(p) for p in ring]
    if coords and coords[0] != coords[-1]:
        coords.append(coords[0])
    return coords


def open_ring(coords: Sequence[Sequence[float]]) -> Ring:
    """Back to the parcel convention: drop the closing point."""
    points = [(float(c[0]), float(c[1])) for c in coords]
    if len(points) > 2 and points[0] == points[-1]:
        points.pop()
    return tuple(points)


class GeometryCapability(Protocol):
    """Operations the engine needs from a robust 2D polygon library."""

    def polygon(self, ring: Sequence[Point]) -> Any: ...
    def union(self, shapes: Sequence[Any]) -> Any: ...
    def intersect(self, a: Any, b: Any) -> Any: ...
    def buffer(self, shape: Any, distance: float) -> Any: ...
    def simplify(self, shape: Any, tolerance: float) -> Any: ...
    def centroid(self, shape: Any) -> Point: ...
    def area(self, shape: Any) -> float: ...
    def parts(self, shape: Any) -> List[PolygonPart]: ...


class ShapelyGeometry:
    """
    GeometryCapability backed by shapely (GEOS).

    Buffers use mitre joins so healed corners stay square instead of
    picking up arc vertices.
    """

    def __init__(self, join_style: str = "mitre", mitre_limit: float = 5.0):
        self.join_style = join_style
        self.mitre_limit = mitre_limit

    def polygon(self, ring: Sequence[Point]) -> Any:
        poly = Polygon(close_ring(ring))
        if not poly.is_valid:
            logger.debug("Repairing invalid ring before boolean operations")
            return make_valid(poly)
        return poly

    def union(self, shapes: Sequence[Any]) -> Any:
        return unary_union(list(shapes))

    def intersect(self, a: Any, b: Any) -> Any:
        return a.intersection(b)

    def buffer(self, shape: Any, distance: float) -> Any:
        return shape.buffer(distance, join_style=self.join_style, mitre_limit=self.mitre_limit)

    def simplify(self, shape: Any, tolerance: float) -> Any:
        return shape.simplify(tolerance, preserve_topology=True)

    def centroid(self, shape: Any) -> Point:
        # Area-weighted for polygonal input, unlike a mean of the vertices
        c = shape.centroid
        return float(c.x), float(c.y)

    def area(self, shape: Any) -> float:
        return float(shape.area)

    def parts(self, shape: Any) -> List[PolygonPart]:
        """Polygon parts with non-zero area; lines and points are discarded."""
        if shape is None or shape.is_empty:
            return []
        return [
            (open_ring(p.exterior.coords), tuple(open_ring(h.coords) for h in p.interiors))
            for p in self._polygons_of(shape)
            if p.area > 0
        ]

    def _polygons_of(self, geom: Any) -> List[Polygon]:
        if isinstance(geom, Polygon):
            return [geom]
        if isinstance(geom, (MultiPolygon, GeometryCollection)):
            return [p for g in geom.geoms for p in self._polygons_of(g)]
        return []


_default_capability: GeometryCapability | None = None


def default_capability() -> GeometryCapability:
    """Process-wide shapely capability, created on first use."""
    global _default_capability
    if _default_capability is None:
        _default_capability = ShapelyGeometry()
    return _default_capability
