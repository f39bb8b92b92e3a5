"""
Parcel Split
Cuts a single-ring parcel in two along the line through two points.

The two points only fix the direction of the cut; the line is extended well
past the parcel on both sides and the parcel is intersected with the two
half-planes it bounds.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from config.settings import PARCEL_MIN_PART_AREA, PARCEL_SIMPLIFY_TOLERANCE, PARCEL_SPLIT_REACH_FACTOR
from pipelines.parcels.models import Parcel, Point, parse_point
from .capability import GeometryCapability, default_capability
from .merge import Outline, outline_of

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SplitResult:
    """`part1` lies left of the a -> b direction, `part2` right of it."""

    part1: Outline
    part2: Outline

    def to_dict(self) -> Dict[str, Any]:
        return {"part1": self.part1.to_dict(), "part2": self.part2.to_dict()}


def _half_plane_masks(a: Point, b: Point, reach: float):
    """Two rectangles sharing the extended cut line as one side, one per side of it."""
    length = math.hypot(b[0] - a[0], b[1] - a[1])
    ux, uy = (b[0] - a[0]) / length, (b[1] - a[1]) / length
    nx, ny = -uy, ux

    start = (a[0] - ux * reach, a[1] - uy * reach)
    end = (b[0] + ux * reach, b[1] + uy * reach)

    left = [
        start,
        end,
        (end[0] + nx * reach, end[1] + ny * reach),
        (start[0] + nx * reach, start[1] + ny * reach),
    ]
    right = [
        start,
        end,
        (end[0] - nx * reach, end[1] - ny * reach),
        (start[0] - nx * reach, start[1] - ny * reach),
    ]
    return left, right


def _reach(ring: Sequence[Point], a: Point, b: Point, factor: float) -> float:
    xs = [p[0] for p in ring] + [a[0], b[0]]
    ys = [p[1] for p in ring] + [a[1], b[1]]
    extent = math.hypot(max(xs) - min(xs), max(ys) - min(ys))
    return max(extent, 1.0) * factor


def split(
    parcel: Parcel,
    point_a: Any,
    point_b: Any,
    capability: Optional[GeometryCapability] = None,
    simplify_tolerance: float = PARCEL_SIMPLIFY_TOLERANCE,
    reach_factor: float = PARCEL_SPLIT_REACH_FACTOR,
    min_part_area: float = PARCEL_MIN_PART_AREA,
) -> Optional[SplitResult]:
    """
    Split a parcel along the line through point_a and point_b.

    Args:
        parcel: Single-ring parcel snapshot
        point_a, point_b: Two distinct points on the cut line ([x, y] or {"x", "y"})
        capability: Boolean-geometry backend; shapely unless given
        simplify_tolerance: Near-collinear vertex removal tolerance for the parts
        reach_factor: Multiple of the parcel/cut extent the line and masks extend to
        min_part_area: Parts with this area or less count as empty

    Returns:
        SplitResult, or None for multi-ring parcels, coincident points, or a
        line that leaves one side empty
    """
    if parcel.is_multi_ring:
        logger.warning(f"Split of {parcel.id} rejected: multi-ring parcels cannot be split")
        return None

    a, b = parse_point(point_a), parse_point(point_b)
    if not all(math.isfinite(v) for v in (*a, *b)):
        logger.warning(f"Split of {parcel.id} rejected: non-finite cut point")
        return None
    if math.hypot(b[0] - a[0], b[1] - a[1]) == 0.0:
        logger.warning(f"Split of {parcel.id} rejected: cut points coincide")
        return None

    capability = capability or default_capability()
    ring = parcel.rings[0]
    shape = capability.polygon(ring)

    left_mask, right_mask = _half_plane_masks(a, b, _reach(ring, a, b, reach_factor))
    side1 = capability.intersect(shape, capability.polygon(left_mask))
    side2 = capability.intersect(shape, capability.polygon(right_mask))

    area1, area2 = capability.area(side1), capability.area(side2)
    if area1 <= min_part_area or area2 <= min_part_area:
        logger.warning(
            f"Split of {parcel.id} found nothing to cut: side areas {area1:.6g} / {area2:.6g}"
        )
        return None

    part1 = outline_of(side1, capability, simplify_tolerance)
    part2 = outline_of(side2, capability, simplify_tolerance)
    if part1 is None or part2 is None:
        logger.warning(f"Split of {parcel.id} left a degenerate side after simplification")
        return None

    logger.info(f"Split {parcel.id} into parts of {part1.area:.6g} and {part2.area:.6g}")
    return SplitResult(part1=part1, part2=part2)
