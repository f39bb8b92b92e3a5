"""
Parcels Module
Parcel snapshots, the adjacency oracle and the area combination search
"""
from .models import Parcel, group_by_block
from .adjacency import are_neighbors, BlockAdjacency
from .combinations import find_combinations, Combination

__all__ = ["Parcel", "group_by_block", "are_neighbors", "BlockAdjacency", "find_combinations", "Combination"]
