"""
Lineage Service
Builds the parcel records a caller should persist after a merge or split.

The geometry engine only returns outlines; this service turns them into
record proposals carrying ids, keys, aliases and a history entry pointing
back at the parcels they came from. Nothing is written here.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

from pipelines.errors import ParcelContractError
from pipelines.parcels.models import Parcel

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class LineageService:
    """
    Args:
        id_factory: produces ids for new records (uuid4 hex by default)
        clock: produces the ISO-8601 timestamp stored in history entries
    """

    def __init__(self, id_factory: Optional[Callable[[], str]] = None,
                 clock: Optional[Callable[[], str]] = None):
        self._new_id = id_factory or (lambda: uuid.uuid4().hex)
        self._now = clock or _now_iso

    def propose_merge(self, parcels: Sequence[Parcel], boundary: Any) -> Dict[str, Any]:
        """
        Record for the parcel produced by merging `parcels`.

        Args:
            parcels: the merged parcels, all from one block
            boundary: the merged outline (single ring or list of rings)

        Returns:
            Dict with id, block_key, unit_key, aliases, boundary, attributes, history
        """
        if len(parcels) < 2:
            raise ParcelContractError("A merge needs at least 2 parcels")
        blocks = {p.block_key for p in parcels}
        if len(blocks) != 1:
            raise ParcelContractError(f"Merged parcels must share one block, got {sorted(blocks)}")

        areas = [p.area for p in parcels if p.area is not None]
        attributes: Dict[str, Any] = {}
        if areas:
            attributes["area"] = sum(areas)

        record = {
            "id": self._new_id(),
            "block_key": parcels[0].block_key,
            "unit_key": " & ".join(p.unit_key for p in parcels),
            "aliases": [p.unit_key for p in parcels],
            "boundary": boundary,
            "attributes": attributes,
            "history": {
                "type": "merge",
                "parent_ids": [p.id for p in parcels],
                "timestamp": self._now(),
            },
        }
        logger.info(f"Merge proposal {record['id']} for block {record['block_key']}: {record['unit_key']}")
        return record

    def propose_split(self, parcel: Parcel, part1: Any, part2: Any) -> List[Dict[str, Any]]:
        """Two records, `<unit>A` and `<unit>B`; areas are left for the operator to enter."""
        timestamp = self._now()
        records = []
        for suffix, boundary in (("A", part1), ("B", part2)):
            records.append({
                "id": self._new_id(),
                "block_key": parcel.block_key,
                "unit_key": f"{parcel.unit_key}{suffix}",
                "aliases": [],
                "boundary": boundary,
                "attributes": {},
                "history": {"type": "split", "origin_id": parcel.id, "timestamp": timestamp},
            })
        logger.info(f"Split proposal for parcel {parcel.id}: {records[0]['unit_key']}, {records[1]['unit_key']}")
        return records
