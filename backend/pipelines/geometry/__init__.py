"""
Geometry Module
Merge and split of parcel boundaries on top of a polygon geometry capability
"""
from .capability import GeometryCapability, ShapelyGeometry, default_capability
from .merge import merge, MergeResult, Outline
from .split import split, SplitResult

__all__ = ["GeometryCapability", "ShapelyGeometry", "default_capability", "merge", "MergeResult", "Outline", "split", "SplitResult"]
