"""
Utility modules for the Parcelwise backend.
"""

from utils.response_models import (
    ParcelPayload,
    NeighborsRequest,
    AdjacencyRequest,
    CombinationsRequest,
    MergeRequest,
    SplitRequest,
    LineageMergeRequest,
    LineageSplitRequest,
    CapturePointRequest,
    TransformRequest,
    GeoBoundsPayload,
    GeoJSONRequest,
)

__all__ = [
    'ParcelPayload',
    'NeighborsRequest',
    'AdjacencyRequest',
    'CombinationsRequest',
    'MergeRequest',
    'SplitRequest',
    'LineageMergeRequest',
    'LineageSplitRequest',
    'CapturePointRequest',
    'TransformRequest',
    'GeoBoundsPayload',
    'GeoJSONRequest',
]
