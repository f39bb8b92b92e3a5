"""
Parcel snapshot model shared by the adjacency, combination and geometry code.

Parcels arrive as JSON-shaped dicts from the editor:

    {"id": "5-10", "block_key": "5", "unit_key": "10",
     "boundary": [[x, y], ...] or [[[x, y], ...], ...],
     "attributes": {"area": 480.0, "owner": "..."}}

A boundary is either a single ring or a list of rings (the leftovers of a
merge that could not be resolved into one polygon). Rings are stored open:
a trailing point equal to the first one is dropped on the way in.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from pipelines.errors import ParcelContractError

Point = Tuple[float, float]
Ring = Tuple[Point, ...]
Boundary = Union[List[List[float]], List[List[List[float]]]]


def parse_point(raw: Any) -> Point:
    """Accept [x, y] pairs as well as {"x": .., "y": ..} objects."""
    if isinstance(raw, dict):
        try:
            return float(raw["x"]), float(raw["y"])
        except (KeyError, TypeError, ValueError) as e:
            raise ParcelContractError(f"Invalid point {raw!r}: {e}")
    if isinstance(raw, (list, tuple)) and len(raw) >= 2:
        try:
            return float(raw[0]), float(raw[1])
        except (TypeError, ValueError) as e:
            raise ParcelContractError(f"Invalid point {raw!r}: {e}")
    raise ParcelContractError(f"Invalid point {raw!r}")


def normalize_ring(raw_ring: Sequence[Any]) -> Ring:
    """Parse a ring, drop an explicit closing point and enforce >= 3 vertices."""
    points = [parse_point(p) for p in raw_ring]
    if len(points) > 1 and points[0] == points[-1]:
        points.pop()
    if len(points) < 3:
        raise ParcelContractError(f"A ring needs at least 3 points, got {len(points)}")
    return tuple(points)


def _is_multi_ring(raw_boundary: Sequence[Any]) -> bool:
    # [[x, y], ...] holds numbers (or point dicts) one level down;
    # [[[x, y], ...], ...] holds point sequences.
    first = raw_boundary[0]
    if isinstance(first, (list, tuple)) and first:
        return isinstance(first[0], (list, tuple, dict))
    return False


def parse_boundary(raw_boundary: Sequence[Any]) -> Tuple[Tuple[Ring, ...], bool]:
    """Return (rings, is_multi) for a raw single-ring or multi-ring boundary."""
    if not isinstance(raw_boundary, (list, tuple)):
        raise ParcelContractError(f"Boundary must be a list of points or rings, got {type(raw_boundary).__name__}")
    if not raw_boundary:
        raise ParcelContractError("Boundary is empty")
    if _is_multi_ring(raw_boundary):
        rings = tuple(normalize_ring(r) for r in raw_boundary)
        return rings, True
    return (normalize_ring(raw_boundary),), False


@dataclass(frozen=True)
class Parcel:
    """
    Immutable snapshot of one parcel.

    `attributes["area"]` is the operator-entered area; it is deliberately not
    derived from the drawn boundary.
    """

    id: str
    block_key: str
    unit_key: str
    rings: Tuple[Ring, ...]
    is_multi_ring: bool = False
    attributes: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self):
        if not self.rings:
            raise ParcelContractError(f"Parcel {self.id} has no rings")
        for ring in self.rings:
            if len(ring) < 3:
                raise ParcelContractError(f"Parcel {self.id} has a ring with fewer than 3 points")
        if len(self.rings) > 1 and not self.is_multi_ring:
            object.__setattr__(self, "is_multi_ring", True)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Parcel":
        if not isinstance(data, dict):
            raise ParcelContractError("Parcel must be an object")
        if "id" not in data or "boundary" not in data:
            raise ParcelContractError("Parcel requires 'id' and 'boundary'")
        rings, is_multi = parse_boundary(data["boundary"])
        return cls(
            id=str(data["id"]),
            block_key=str(data.get("block_key", "")),
            unit_key=str(data.get("unit_key", "")),
            rings=rings,
            is_multi_ring=is_multi,
            attributes=dict(data.get("attributes") or {}),
        )

    @classmethod
    def from_ring(cls, id: str, block_key: str, ring: Iterable[Any], area: Optional[float] = None,
                  unit_key: str = "") -> "Parcel":
        attributes = {} if area is None else {"area": area}
        return cls(id=id, block_key=block_key, unit_key=unit_key or id,
                   rings=(normalize_ring(list(ring)),), attributes=attributes)

    @property
    def boundary(self) -> Boundary:
        """JSON shape of the boundary: one ring, or a list of rings."""
        as_lists = [[[x, y] for x, y in ring] for ring in self.rings]
        return as_lists if self.is_multi_ring else as_lists[0]

    @property
    def area(self) -> Optional[float]:
        """Operator-entered area, or None when absent or not a finite number."""
        value = self.attributes.get("area")
        if value is None or isinstance(value, bool):
            return None
        try:
            area = float(value)
        except (TypeError, ValueError):
            return None
        return area if math.isfinite(area) else None

    def vertices(self) -> List[Point]:
        return [p for ring in self.rings for p in ring]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "block_key": self.block_key,
            "unit_key": self.unit_key,
            "boundary": self.boundary,
            "attributes": dict(self.attributes),
        }


def group_by_block(parcels: Iterable[Parcel]) -> Dict[str, List[Parcel]]:
    """Bucket parcels by block key, keeping input order inside each block."""
    blocks: Dict[str, List[Parcel]] = {}
    for parcel in parcels:
        blocks.setdefault(parcel.block_key, []).append(parcel)
    return blocks
