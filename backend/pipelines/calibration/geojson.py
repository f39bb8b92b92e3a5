"""
Parcel -> GeoJSON projection through the live calibration.

GeoJSON positions are [axis2, axis1] (lng, lat). Points that cannot be
projected, or fall outside an optional bounding box, are dropped; rings
left with fewer than 3 points are dropped with them.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from pipelines.parcels.models import Parcel, Ring
from .calibration import Calibration

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeoBounds:
    min_axis1: float
    max_axis1: float
    min_axis2: float
    max_axis2: float

    def contains(self, axis1: float, axis2: float) -> bool:
        return self.min_axis1 <= axis1 <= self.max_axis1 and self.min_axis2 <= axis2 <= self.max_axis2


def _project_ring(ring: Ring, calibration: Calibration, bounds: Optional[GeoBounds]) -> Optional[List[List[float]]]:
    projected = []
    for x, y in ring:
        geo = calibration.local_to_geo(x, y)
        if geo is None:
            continue
        if bounds is not None and not bounds.contains(*geo):
            continue
        projected.append([geo[1], geo[0]])
    if len(projected) < 3:
        return None
    projected.append(list(projected[0]))
    return projected


def parcel_to_feature(parcel: Parcel, calibration: Calibration,
                      bounds: Optional[GeoBounds] = None) -> Optional[Dict[str, Any]]:
    """GeoJSON Feature for a parcel, or None when nothing could be projected."""
    rings = [r for r in (_project_ring(ring, calibration, bounds) for ring in parcel.rings) if r]
    if not rings:
        logger.warning(f"Parcel {parcel.id} ({parcel.block_key}-{parcel.unit_key}) has no projectable coordinates")
        return None

    if parcel.is_multi_ring:
        geometry = {"type": "MultiPolygon", "coordinates": [[ring] for ring in rings]}
    else:
        geometry = {"type": "Polygon", "coordinates": rings}

    return {
        "type": "Feature",
        "properties": {
            "id": parcel.id,
            "block_key": parcel.block_key,
            "unit_key": parcel.unit_key,
            "area": parcel.area,
            "attributes": dict(parcel.attributes),
        },
        "geometry": geometry,
    }


def parcels_to_feature_collection(parcels: Iterable[Parcel], calibration: Calibration,
                                  bounds: Optional[GeoBounds] = None) -> Dict[str, Any]:
    parcels = list(parcels)
    features = [f for f in (parcel_to_feature(p, calibration, bounds) for p in parcels) if f is not None]
    logger.info(f"GeoJSON created with {len(features)} of {len(parcels)} parcels")
    return {"type": "FeatureCollection", "features": features}
