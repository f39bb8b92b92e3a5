"""
Parcel Merge
Unions the drawn boundaries of two or more parcels into one boundary.

Hand-drawn neighbours often leave hairline gaps along their shared edge, so
a union that comes out in pieces is retried with every ring slightly
buffered ("gap healing"). If it is still in pieces, every piece is kept and
the result is a multi-ring boundary; nothing is dropped.

Ids and attributes of the merged parcel are up to the caller.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from config.settings import PARCEL_HEAL_BUFFER, PARCEL_SIMPLIFY_TOLERANCE
from pipelines.errors import GeometryIssue, ParcelContractError
from pipelines.parcels.models import Parcel, Point, Ring
from .capability import GeometryCapability, default_capability

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Outline:
    """Boundary of a derived shape: one ring, or several when it is in pieces."""

    rings: Tuple[Ring, ...]
    centroid: Point
    area: float

    @property
    def is_multi_ring(self) -> bool:
        return len(self.rings) > 1

    @property
    def boundary(self) -> Union[List[List[float]], List[List[List[float]]]]:
        as_lists = [[[x, y] for x, y in ring] for ring in self.rings]
        return as_lists if self.is_multi_ring else as_lists[0]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "boundary": self.boundary,
            "centroid": list(self.centroid),
            "area": self.area,
            "multi": self.is_multi_ring,
        }


@dataclass(frozen=True)
class MergeResult:
    outline: Outline
    healed: bool = False
    issue: Optional[GeometryIssue] = None

    @property
    def boundary(self):
        return self.outline.boundary

    @property
    def centroid(self) -> Point:
        return self.outline.centroid

    @property
    def is_multi_ring(self) -> bool:
        return self.outline.is_multi_ring

    def to_dict(self) -> Dict[str, Any]:
        result = self.outline.to_dict()
        result["healed"] = self.healed
        result["issue"] = self.issue.value if self.issue else None
        return result


def outline_of(shape: Any, capability: GeometryCapability, simplify_tolerance: float) -> Optional[Outline]:
    """
    Simplify a polygonal shape and describe it as parcel rings.

    A single part gives its outer ring and the area-weighted centroid of that
    ring; several parts give one ring per part and the centroid of the whole.
    Returns None when nothing with area is left.
    """
    simplified = capability.simplify(shape, simplify_tolerance)
    parts = capability.parts(simplified)
    if not parts:
        return None
    if len(parts) == 1:
        exterior, holes = parts[0]
        if holes:
            logger.debug(f"Dropping {len(holes)} interior ring(s) from a single-part outline")
        ring_shape = capability.polygon(exterior)
        return Outline(
            rings=(exterior,),
            centroid=capability.centroid(ring_shape),
            area=capability.area(ring_shape),
        )
    return Outline(
        rings=tuple(exterior for exterior, _ in parts),
        centroid=capability.centroid(simplified),
        area=capability.area(simplified),
    )


def merge(
    parcels: Sequence[Parcel],
    capability: Optional[GeometryCapability] = None,
    heal_buffer: float = PARCEL_HEAL_BUFFER,
    simplify_tolerance: float = PARCEL_SIMPLIFY_TOLERANCE,
) -> Optional[MergeResult]:
    """
    Merge the boundaries of two or more parcels.

    Args:
        parcels: At least two parcel snapshots (rings of multi-ring parcels all take part)
        capability: Boolean-geometry backend; shapely unless given
        heal_buffer: Buffer distance used to bridge gaps when the plain union is disjoint
        simplify_tolerance: Near-collinear vertex removal tolerance

    Returns:
        MergeResult, multi-ring when the union stays disjoint after healing;
        None when the inputs have no area at all
    """
    if len(parcels) < 2:
        raise ParcelContractError(f"merge needs at least 2 parcels, got {len(parcels)}")
    capability = capability or default_capability()
    ids = [p.id for p in parcels]

    shapes = [capability.polygon(ring) for parcel in parcels for ring in parcel.rings]
    union = capability.union(shapes)
    parts = capability.parts(union)

    if not parts:
        logger.warning(f"Merge of {ids} produced no area")
        return None

    if len(parts) == 1:
        outline = outline_of(union, capability, simplify_tolerance)
        if outline is None:
            return None
        logger.info(f"Merged {ids} into a single boundary ({len(outline.rings[0])} vertices)")
        return MergeResult(outline=outline)

    logger.warning(f"Merge of {ids} is disjoint ({len(parts)} parts); retrying with a {heal_buffer} buffer")
    healed_union = capability.union([capability.buffer(s, heal_buffer) for s in shapes])
    if len(capability.parts(healed_union)) == 1:
        outline = outline_of(healed_union, capability, simplify_tolerance)
        if outline is not None:
            logger.info(f"Gap healing bridged {ids} into a single boundary")
            return MergeResult(outline=outline, healed=True)

    logger.warning(f"Merge of {ids} stays disjoint after healing; returning {len(parts)} rings")
    dropped_holes = sum(len(holes) for _, holes in parts)
    if dropped_holes:
        logger.debug(f"Dropping {dropped_holes} interior ring(s) from the disjoint merge of {ids}")
    outline = Outline(
        rings=tuple(exterior for exterior, _ in parts),
        centroid=capability.centroid(union),
        area=capability.area(union),
    )
    return MergeResult(outline=outline, issue=GeometryIssue.TOPOLOGICAL_GAP)
