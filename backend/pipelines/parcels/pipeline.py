"""
Parcel Geometry Pipeline
Turns JSON parcel snapshots into engine calls and engine outcomes into
response dicts for the API layer.

Expected "no result" outcomes come back as {"success": False, "reason": ...};
malformed input raises ParcelContractError.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence

from config import settings
from pipelines.errors import GeometryIssue, ParcelContractError
from pipelines.geometry.capability import GeometryCapability, default_capability
from pipelines.geometry.merge import merge
from pipelines.geometry.split import split
from .adjacency import BlockAdjacency, are_neighbors
from .combinations import find_combinations
from .models import Parcel, group_by_block

logger = logging.getLogger(__name__)


def _failure(issue: GeometryIssue, message: str) -> Dict[str, Any]:
    return {"success": False, "reason": issue.value, "error": message}


class ParcelGeometryPipeline:
    """
    Entry point used by the API: parse, run the engine, shape the response.
    """

    def __init__(self, capability: Optional[GeometryCapability] = None):
        self.capability = capability or default_capability()

    def parse_parcels(self, parcels_data: Sequence[Dict[str, Any]]) -> List[Parcel]:
        if not isinstance(parcels_data, (list, tuple)):
            raise ParcelContractError("parcels must be a list")
        parcels = []
        for index, data in enumerate(parcels_data):
            try:
                parcels.append(data if isinstance(data, Parcel) else Parcel.from_dict(data))
            except ParcelContractError as e:
                raise ParcelContractError(f"Parcel {index}: {e}")
        return parcels

    def neighbors(self, parcel_a: Dict[str, Any], parcel_b: Dict[str, Any]) -> Dict[str, Any]:
        a, b = self.parse_parcels([parcel_a, parcel_b])
        return {"success": True, "neighbors": are_neighbors(a, b)}

    def adjacency(self, parcels_data: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
        """Neighbour lists per parcel id, block by block."""
        parcels = self.parse_parcels(parcels_data)
        blocks = {
            block_key: BlockAdjacency(block_parcels).as_id_map()
            for block_key, block_parcels in group_by_block(parcels).items()
        }
        return {"success": True, "blocks": blocks}

    def combinations(self, parcels_data: Sequence[Dict[str, Any]], target_area: float,
                     tolerance_pct: Optional[float] = None) -> Dict[str, Any]:
        parcels = self.parse_parcels(parcels_data)
        tolerance = settings.PARCEL_COMBINATION_TOLERANCE_PCT if tolerance_pct is None else tolerance_pct
        results = find_combinations(parcels, target_area, tolerance)
        response: Dict[str, Any] = {
            "success": True,
            "target_area": target_area,
            "tolerance_pct": tolerance,
            "range": [target_area * (1 - tolerance), target_area * (1 + tolerance)],
            "combinations": [r.to_dict() for r in results],
        }
        if not any((p.area or 0) > 0 for p in parcels):
            response["reason"] = GeometryIssue.INSUFFICIENT_DATA.value
        return response

    def merge(self, parcels_data: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
        parcels = self.parse_parcels(parcels_data)
        result = merge(parcels, capability=self.capability)
        if result is None:
            return _failure(GeometryIssue.GEOMETRY_DEGENERATE, "Merged boundaries enclose no area")
        response = {"success": True, "parent_ids": [p.id for p in parcels]}
        response.update(result.to_dict())
        return response

    def split(self, parcel_data: Dict[str, Any], point_a: Any, point_b: Any) -> Dict[str, Any]:
        parcel = self.parse_parcels([parcel_data])[0]
        if parcel.is_multi_ring:
            return _failure(GeometryIssue.INSUFFICIENT_DATA, "Multi-ring parcels cannot be split")
        result = split(parcel, point_a, point_b, capability=self.capability)
        if result is None:
            return _failure(GeometryIssue.GEOMETRY_DEGENERATE, "Cut line does not divide the parcel in two")
        response = {"success": True, "origin_id": parcel.id}
        response.update(result.to_dict())
        return response

    def get_available_options(self) -> dict:
        """Tunables the engine runs with, for the editor's settings panel."""
        return {
            "vertex_tolerance": settings.PARCEL_VERTEX_TOLERANCE,
            "combination_tolerance_pct": settings.PARCEL_COMBINATION_TOLERANCE_PCT,
            "heal_buffer": settings.PARCEL_HEAL_BUFFER,
            "simplify_tolerance": settings.PARCEL_SIMPLIFY_TOLERANCE,
            "split_reach_factor": settings.PARCEL_SPLIT_REACH_FACTOR,
            "max_combination_size": 3,
        }
