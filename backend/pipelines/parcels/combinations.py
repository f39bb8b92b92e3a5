"""
Combination Search Engine
Finds single parcels, adjacent pairs and contiguous triples whose
operator-entered areas add up to (nearly) a target area.

The search stops at triples. Larger sets are not explored.
"""
import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Set, Tuple

from config.settings import PARCEL_COMBINATION_TOLERANCE_PCT, PARCEL_VERTEX_TOLERANCE
from pipelines.errors import ParcelContractError
from .adjacency import BlockAdjacency
from .models import Parcel, group_by_block

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Combination:
    """A candidate set of parcels; `members` are parcel ids in sorted order."""

    members: Tuple[str, ...]
    total_area: float

    def to_dict(self) -> dict:
        return {"members": list(self.members), "total_area": self.total_area}


class _ResultCollector:
    """Accepts each distinct member set once, in discovery order."""

    def __init__(self):
        self.results: List[Combination] = []
        self._seen: Set[Tuple[str, ...]] = set()

    def add(self, parcels: Iterable[Parcel]) -> bool:
        parcels = list(parcels)
        key = tuple(sorted(p.id for p in parcels))
        if key in self._seen:
            return False
        self._seen.add(key)
        total = sum(p.area for p in parcels)
        self.results.append(Combination(members=key, total_area=total))
        return True


def _candidates(parcels: Iterable[Parcel]) -> List[Parcel]:
    """Parcels with a defined, positive area; the rest cannot take part."""
    eligible = []
    skipped = 0
    for parcel in parcels:
        area = parcel.area
        if area is not None and area > 0:
            eligible.append(parcel)
        else:
            skipped += 1
    if skipped:
        logger.debug(f"Combination search skipped {skipped} parcels without an area")
    return eligible


def find_combinations(
    parcels: Sequence[Parcel],
    target_area: float,
    tolerance_pct: float = PARCEL_COMBINATION_TOLERANCE_PCT,
    vertex_tolerance: float = PARCEL_VERTEX_TOLERANCE,
) -> List[Combination]:
    """
    Search singles, adjacent pairs and contiguous triples whose area sum lies
    in [target * (1 - tolerance_pct), target * (1 + tolerance_pct)].

    Args:
        parcels: Parcel snapshots; parcels without a positive area are ignored
        target_area: Area the operator is looking for
        tolerance_pct: Relative half-width of the accepted band (0.05 = 5%)
        vertex_tolerance: Vertex matching distance used for adjacency

    Returns:
        list: Combinations ordered by closeness to the target
    """
    if tolerance_pct < 0 or not math.isfinite(tolerance_pct):
        raise ParcelContractError(f"tolerance_pct must be a non-negative number, got {tolerance_pct}")
    if not math.isfinite(target_area):
        raise ParcelContractError(f"target_area must be finite, got {target_area}")

    min_area = target_area * (1 - tolerance_pct)
    max_area = target_area * (1 + tolerance_pct)

    def in_range(total: float) -> bool:
        return min_area <= total <= max_area

    candidates = _candidates(parcels)
    collector = _ResultCollector()

    # Phase 1: singles
    for parcel in candidates:
        if in_range(parcel.area):
            collector.add([parcel])

    blocks: Dict[str, BlockAdjacency] = {
        block_key: BlockAdjacency(block_parcels, tolerance=vertex_tolerance)
        for block_key, block_parcels in group_by_block(candidates).items()
    }

    # Phase 2: adjacent pairs inside a block
    for graph in blocks.values():
        arena = graph.parcels
        for i in range(len(arena)):
            for j in range(i + 1, len(arena)):
                if in_range(arena[i].area + arena[j].area) and graph.is_adjacent(i, j):
                    collector.add([arena[i], arena[j]])

    # Phase 3: an adjacent pair plus a neighbour of either member
    for graph in blocks.values():
        arena = graph.parcels
        for u, v in graph.edges():
            pair_sum = arena[u].area + arena[v].area
            third_options = sorted(set(graph.neighbors[u]) | set(graph.neighbors[v]))
            for w in third_options:
                if w == u or w == v:
                    continue
                if in_range(pair_sum + arena[w].area):
                    collector.add([arena[u], arena[v], arena[w]])

    results = sorted(collector.results, key=lambda c: abs(c.total_area - target_area))
    logger.info(
        f"Combination search for {target_area} (+/-{tolerance_pct:.0%}): "
        f"{len(candidates)} candidates, {len(results)} combinations"
    )
    return results
