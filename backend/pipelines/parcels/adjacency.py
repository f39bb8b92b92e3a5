"""
Parcel Adjacency Oracle
Decides whether two parcels share an edge by matching their vertices.

Adjacency is never stored; drawings are edited freely, so it is recomputed
from geometry on every call.
"""
import logging
from typing import Dict, List, Sequence, Set

import numpy as np

from config.settings import PARCEL_VERTEX_TOLERANCE
from .models import Parcel

logger = logging.getLogger(__name__)


def _vertex_array(parcel: Parcel) -> np.ndarray:
    return np.asarray(parcel.vertices(), dtype=float).reshape(-1, 2)


def _proximity_matrix(v1: np.ndarray, v2: np.ndarray, tolerance: float) -> np.ndarray:
    """Boolean V1 x V2 matrix: True where two vertices are within tolerance."""
    deltas = v1[:, None, :] - v2[None, :, :]
    dist_sq = np.einsum("ijk,ijk->ij", deltas, deltas)
    return dist_sq < tolerance * tolerance


def _shares_edge(v1: np.ndarray, v2: np.ndarray, tolerance: float) -> bool:
    matches = _proximity_matrix(v1, v2, tolerance)
    # Two disjoint pairs exist unless every close pair shares the same vertex
    # of the first parcel (one row) or of the second (one column).
    rows = int(np.count_nonzero(matches.any(axis=1)))
    cols = int(np.count_nonzero(matches.any(axis=0)))
    return rows >= 2 and cols >= 2


def are_neighbors(p1: Parcel, p2: Parcel, tolerance: float = PARCEL_VERTEX_TOLERANCE) -> bool:
    """
    True when the parcels share an edge: two distinct vertex pairs coincide.

    A single coinciding vertex is a corner touch and does not count. Every
    vertex, on either side, takes part in at most one pair, so the answer is
    the same whichever parcel is passed first.

    Shared edges are recognised only where both drawings put a vertex at both
    edge ends; a shared segment without coinciding vertices is missed.
    """
    if p1.block_key != p2.block_key:
        return False
    if p1.id == p2.id:
        return False

    return _shares_edge(_vertex_array(p1), _vertex_array(p2), tolerance)


class BlockAdjacency:
    """
    Adjacency list for the parcels of one block, built once.

    Parcels live in an arena (`self.parcels`) and are referred to by their
    position in it; `neighbors[i]` lists the positions adjacent to parcel i
    in ascending order.
    """

    def __init__(self, parcels: Sequence[Parcel], tolerance: float = PARCEL_VERTEX_TOLERANCE):
        self.parcels: List[Parcel] = list(parcels)
        self.tolerance = tolerance
        self.neighbors: List[List[int]] = [[] for _ in self.parcels]
        self._edges: Set[tuple] = set()
        self._build()

    def _build(self) -> None:
        vertex_arrays = [_vertex_array(p) for p in self.parcels]
        count = len(self.parcels)
        for i in range(count):
            for j in range(i + 1, count):
                if self.parcels[i].block_key != self.parcels[j].block_key:
                    continue
                if self.parcels[i].id == self.parcels[j].id:
                    continue
                if _shares_edge(vertex_arrays[i], vertex_arrays[j], self.tolerance):
                    self.neighbors[i].append(j)
                    self.neighbors[j].append(i)
                    self._edges.add((i, j))
        logger.debug(f"Block adjacency built: {count} parcels, {len(self._edges)} shared edges")

    def __len__(self) -> int:
        return len(self.parcels)

    def is_adjacent(self, i: int, j: int) -> bool:
        return (min(i, j), max(i, j)) in self._edges

    def edges(self) -> List[tuple]:
        """Adjacent position pairs (i, j) with i < j, in ascending order."""
        return sorted(self._edges)

    def as_id_map(self) -> Dict[str, List[str]]:
        return {
            self.parcels[i].id: [self.parcels[j].id for j in nbrs]
            for i, nbrs in enumerate(self.neighbors)
        }
