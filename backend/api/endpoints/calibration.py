"""
Calibration API Endpoints
Three-point capture of the drawing-plane to geographic transform, point
conversion both ways, and GeoJSON export of parcels.
"""
from fastapi import APIRouter, HTTPException, status
from typing import Dict, Any
import logging

from pipelines.calibration.affine import ControlPoint
from pipelines.calibration.geojson import GeoBounds, parcels_to_feature_collection
from pipelines.errors import ParcelContractError
from pipelines.parcels.models import Parcel
from services.calibration.calibration_singleton import get_calibration_service
from utils.response_models import CapturePointRequest, GeoJSONRequest, TransformRequest

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/status")
async def calibration_status() -> Dict[str, Any]:
    service = get_calibration_service()
    result = {"success": True}
    result.update(service.calibration.status())
    result["capture"] = {"captured": service.capture.captured}
    return result


@router.post("/capture")
async def capture_point(request: CapturePointRequest) -> Dict[str, Any]:
    """
    Capture the next of the three control points; the third one commits
    """
    service = get_calibration_service()
    point = ControlPoint(x=request.x, y=request.y, axis1=request.axis1, axis2=request.axis2)
    try:
        outcome = service.capture.capture(point)
    except OSError as e:
        logger.error(f"Could not persist calibration: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Calibration not saved: {str(e)}"
        )
    result = {"success": not outcome.complete or outcome.committed}
    result.update(outcome.to_dict())
    return result


@router.post("/capture/cancel")
async def cancel_capture() -> Dict[str, Any]:
    dropped = get_calibration_service().capture.cancel()
    logger.info(f"Calibration capture cancelled ({dropped} pending points dropped)")
    return {"success": True, "dropped": dropped}


@router.delete("")
async def reset_calibration() -> Dict[str, Any]:
    """
    Delete the saved calibration and go back to the default points
    """
    try:
        generation = get_calibration_service().reset()
    except OSError as e:
        logger.error(f"Calibration reset failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Calibration reset failed: {str(e)}"
        )
    return {"success": True, "generation": generation, "calibrated": False}


@router.get("/export")
async def export_calibration() -> Dict[str, Any]:
    return get_calibration_service().export_document()


@router.post("/to-geo")
async def to_geo(request: TransformRequest) -> Dict[str, Any]:
    """
    Local [x, y] points to geographic [axis1, axis2]; null where unavailable
    """
    calibration = get_calibration_service().calibration
    converted = []
    for point in request.points:
        if len(point) != 2:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Expected [x, y], got {point}")
        geo = calibration.local_to_geo(point[0], point[1])
        converted.append(list(geo) if geo is not None else None)
    return {"success": True, "generation": calibration.generation, "points": converted}


@router.post("/to-local")
async def to_local(request: TransformRequest) -> Dict[str, Any]:
    calibration = get_calibration_service().calibration
    converted = []
    for point in request.points:
        if len(point) != 2:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Expected [axis1, axis2], got {point}")
        local = calibration.geo_to_local(point[0], point[1])
        converted.append(list(local) if local is not None else None)
    return {"success": True, "generation": calibration.generation, "points": converted}


@router.post("/geojson")
async def parcels_geojson(request: GeoJSONRequest) -> Dict[str, Any]:
    """
    FeatureCollection of the given parcels projected through the live calibration
    """
    try:
        parcels = [Parcel.from_dict(p.model_dump()) for p in request.parcels]
    except ParcelContractError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    bounds = GeoBounds(**request.bounds.model_dump()) if request.bounds else None
    calibration = get_calibration_service().calibration
    return parcels_to_feature_collection(parcels, calibration, bounds)
