"""
Central API Router
Combines all API endpoints into a single router for main.py
"""
from fastapi import APIRouter
from api.endpoints import parcels, calibration, system
from api import logs

# Create the main API router
api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(system.router, prefix="/api", tags=["system"])
api_router.include_router(parcels.router, prefix="/api/parcels", tags=["parcels"])
api_router.include_router(calibration.router, prefix="/api/calibration", tags=["calibration"])
api_router.include_router(logs.router, prefix="/api")


# Add a root endpoint for API discovery
@api_router.get("/api")
async def api_root():
    """API root endpoint for discovery"""
    return {
        "message": "Parcelwise API v0.1",
        "documentation": "/docs",
        "endpoints": {
            "neighbors": "/api/parcels/neighbors - Whether two parcels share an edge",
            "adjacency": "/api/parcels/adjacency - Neighbour lists per block",
            "combinations": "/api/parcels/combinations - Contiguous parcel groups matching a target area",
            "merge": "/api/parcels/merge - Union of parcel boundaries with gap healing",
            "split": "/api/parcels/split - Cut a parcel along a line",
            "lineage": "/api/parcels/lineage/{merge,split} - Record proposals for derived parcels",
            "calibration": "/api/calibration/status - Control points and transform state",
            "capture": "/api/calibration/capture - Capture the next control point",
            "transform": "/api/calibration/{to-geo,to-local} - Convert points",
            "geojson": "/api/calibration/geojson - Project parcels to GeoJSON",
            "logs": "/api/logs/recent - Recent log records",
            "health": "/api/health - System health check"
        }
    }
