"""
Shared Request/Response Models
Request bodies for the parcel and calibration endpoints.

Parcel payloads are validated loosely here (shape only); the geometry
checks (ring length, point parsing) live in the parcel model so the same
rules apply to API and library callers.
"""
from pydantic import BaseModel, Field
from typing import Dict, Any, Optional, List, Union

PointPayload = Union[List[float], Dict[str, float]]


class ParcelPayload(BaseModel):
    id: str
    block_key: str = ""
    unit_key: str = ""
    boundary: List[Any]
    attributes: Dict[str, Any] = Field(default_factory=dict)


class NeighborsRequest(BaseModel):
    a: ParcelPayload
    b: ParcelPayload


class AdjacencyRequest(BaseModel):
    parcels: List[ParcelPayload]


class CombinationsRequest(BaseModel):
    parcels: List[ParcelPayload]
    target_area: float
    tolerance_pct: Optional[float] = None


class MergeRequest(BaseModel):
    parcels: List[ParcelPayload]


class SplitRequest(BaseModel):
    parcel: ParcelPayload
    point_a: PointPayload
    point_b: PointPayload


class LineageMergeRequest(BaseModel):
    """Parcels to merge; the outline is computed server-side when omitted."""
    parcels: List[ParcelPayload]
    boundary: Optional[List[Any]] = None


class LineageSplitRequest(BaseModel):
    parcel: ParcelPayload
    point_a: PointPayload
    point_b: PointPayload


class CapturePointRequest(BaseModel):
    x: float
    y: float
    axis1: float
    axis2: float


class TransformRequest(BaseModel):
    """A batch of points: [x, y] for to-geo, [axis1, axis2] for to-local."""
    points: List[List[float]]


class GeoBoundsPayload(BaseModel):
    min_axis1: float
    max_axis1: float
    min_axis2: float
    max_axis2: float


class GeoJSONRequest(BaseModel):
    parcels: List[ParcelPayload]
    bounds: Optional[GeoBoundsPayload] = None
