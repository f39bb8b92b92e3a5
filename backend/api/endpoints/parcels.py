"""
Parcel Geometry API Endpoints
Neighbour checks, area combinations, merge, split and lineage proposals.
"""
from fastapi import APIRouter, HTTPException, status
from typing import Dict, Any
import logging

from pipelines.errors import ParcelContractError
from pipelines.parcels.pipeline import ParcelGeometryPipeline
from services.parcels.lineage_service import LineageService
from utils.response_models import (
    AdjacencyRequest,
    CombinationsRequest,
    LineageMergeRequest,
    LineageSplitRequest,
    MergeRequest,
    NeighborsRequest,
    SplitRequest,
)

logger = logging.getLogger(__name__)
router = APIRouter()

_pipeline = ParcelGeometryPipeline()
_lineage = LineageService()


def _bad_request(e: ParcelContractError) -> HTTPException:
    logger.warning(f"Rejected parcel request: {e}")
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


def _server_error(action: str, e: Exception) -> HTTPException:
    logger.error(f"{action} failed: {str(e)}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"{action} failed: {str(e)}"
    )


@router.post("/neighbors")
async def check_neighbors(request: NeighborsRequest) -> Dict[str, Any]:
    """
    Whether two parcels share an edge
    """
    try:
        return _pipeline.neighbors(request.a.model_dump(), request.b.model_dump())
    except ParcelContractError as e:
        raise _bad_request(e)
    except Exception as e:
        raise _server_error("Neighbour check", e)


@router.post("/adjacency")
async def block_adjacency(request: AdjacencyRequest) -> Dict[str, Any]:
    """
    Neighbour lists for every parcel, grouped by block
    """
    try:
        return _pipeline.adjacency([p.model_dump() for p in request.parcels])
    except ParcelContractError as e:
        raise _bad_request(e)
    except Exception as e:
        raise _server_error("Adjacency", e)


@router.post("/combinations")
async def find_area_combinations(request: CombinationsRequest) -> Dict[str, Any]:
    """
    Contiguous groups of up to 3 parcels whose areas add up to the target
    """
    try:
        return _pipeline.combinations(
            [p.model_dump() for p in request.parcels],
            request.target_area,
            request.tolerance_pct,
        )
    except ParcelContractError as e:
        raise _bad_request(e)
    except Exception as e:
        raise _server_error("Combination search", e)


@router.post("/merge")
async def merge_parcels(request: MergeRequest) -> Dict[str, Any]:
    try:
        return _pipeline.merge([p.model_dump() for p in request.parcels])
    except ParcelContractError as e:
        raise _bad_request(e)
    except Exception as e:
        raise _server_error("Merge", e)


@router.post("/split")
async def split_parcel(request: SplitRequest) -> Dict[str, Any]:
    try:
        return _pipeline.split(request.parcel.model_dump(), request.point_a, request.point_b)
    except ParcelContractError as e:
        raise _bad_request(e)
    except Exception as e:
        raise _server_error("Split", e)


@router.post("/lineage/merge")
async def propose_merge_record(request: LineageMergeRequest) -> Dict[str, Any]:
    """
    Record proposal for a merged parcel; merges the boundaries first unless
    the caller already has the outline
    """
    try:
        parcels = _pipeline.parse_parcels([p.model_dump() for p in request.parcels])
        boundary = request.boundary
        healed = False
        if boundary is None:
            merged = _pipeline.merge(parcels)
            if not merged["success"]:
                return merged
            boundary = merged["boundary"]
            healed = merged["healed"]
        record = _lineage.propose_merge(parcels, boundary)
        return {"success": True, "record": record, "healed": healed}
    except ParcelContractError as e:
        raise _bad_request(e)
    except Exception as e:
        raise _server_error("Merge proposal", e)


@router.post("/lineage/split")
async def propose_split_records(request: LineageSplitRequest) -> Dict[str, Any]:
    try:
        parcel = _pipeline.parse_parcels([request.parcel.model_dump()])[0]
        result = _pipeline.split(parcel, request.point_a, request.point_b)
        if not result["success"]:
            return result
        records = _lineage.propose_split(parcel, result["part1"]["boundary"], result["part2"]["boundary"])
        return {"success": True, "records": records}
    except ParcelContractError as e:
        raise _bad_request(e)
    except Exception as e:
        raise _server_error("Split proposal", e)


@router.get("/options")
async def get_parcel_options() -> Dict[str, Any]:
    """
    Tunables the geometry engine runs with
    """
    return {"success": True, "options": _pipeline.get_available_options()}
