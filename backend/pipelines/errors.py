"""
Outcome taxonomy for the parcel engine.

Expected geometric conditions (collinear control points, a cut line that
misses the parcel, a union that stays disjoint) are never raised; they are
reported through GeometryIssue values. Only contract violations raise.
"""
from enum import Enum


class GeometryIssue(str, Enum):
    """Why an engine call produced no (or a degraded) result."""

    GEOMETRY_DEGENERATE = "geometry_degenerate"
    INSUFFICIENT_DATA = "insufficient_data"
    TOPOLOGICAL_GAP = "topological_gap"


class ParcelContractError(ValueError):
    """Raised when a caller breaks an engine precondition"""
    pass
