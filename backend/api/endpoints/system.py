"""
System Endpoints
================

Cheap health check: process uptime, geometry library versions and the
calibration state. Never triggers heavy work.
"""

from fastapi import APIRouter
from pydantic import BaseModel
import logging
import time

import numpy
import shapely

from services.calibration.calibration_singleton import get_calibration_service

logger = logging.getLogger(__name__)
router = APIRouter()

_STARTED_AT = time.time()


class HealthResponse(BaseModel):
    """Response model for the health check endpoint"""
    status: str
    uptime_seconds: float
    shapely_version: str
    numpy_version: str
    calibration_state: str
    calibration_generation: int


_LAST_HEALTH_LOG_TS: float = 0.0


@router.get("/health", response_model=HealthResponse)
async def check_system_health():
    global _LAST_HEALTH_LOG_TS
    calibration = get_calibration_service().calibration
    uptime = time.time() - _STARTED_AT

    msg = f"🏥 HEALTH ► uptime={uptime:.0f}s calibration={calibration.state.value}"
    now = time.time()
    if now - _LAST_HEALTH_LOG_TS > 60:
        logger.info(msg)
        _LAST_HEALTH_LOG_TS = now
    else:
        logger.debug(msg)

    return HealthResponse(
        status="success",
        uptime_seconds=round(uptime, 1),
        shapely_version=shapely.__version__,
        numpy_version=numpy.__version__,
        calibration_state=calibration.state.value,
        calibration_generation=calibration.generation,
    )
