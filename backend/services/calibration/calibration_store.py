from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple

from config.paths import calibration_file
from pipelines.calibration.affine import ControlPoint
from pipelines.errors import ParcelContractError

logger = logging.getLogger(__name__)

DEFAULT_NOTE = "Control points for the drawing-plane to geographic calibration. Written on operator save."


class CalibrationStore:
    """
    Persist the three calibration control points as one JSON document:

      {"points": [{"local": {"x", "y"}, "geo": {"axis1", "axis2"}} x 3],
       "updated_at": "<ISO-8601>", "note": "..."}

    Loaded once at startup; overwritten atomically on save. A document that
    does not hold exactly three valid records is treated as absent.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = Path(path) if path is not None else calibration_file()

    @property
    def path(self) -> Path:
        return self._path

    def _atomic_write(self, path: Path, data: Dict[str, Any]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix="calibration_", suffix=".json", dir=str(path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, str(path))
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)

    def _read_json_file(self, path: Path) -> Optional[Dict[str, Any]]:
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Unreadable calibration file {path}: {e}")
            return None
        return data if isinstance(data, dict) else None

    def build_document(self, points: Sequence[ControlPoint], note: str = DEFAULT_NOTE) -> Dict[str, Any]:
        if len(points) != 3:
            raise ParcelContractError(f"Calibration documents hold exactly 3 points, got {len(points)}")
        return {
            "points": [p.to_dict() for p in points],
            "updated_at": datetime.now(timezone.utc).isoformat(),
            "note": note,
        }

    def save(self, points: Sequence[ControlPoint], note: str = DEFAULT_NOTE) -> Dict[str, Any]:
        document = self.build_document(points, note)
        self._atomic_write(self._path, document)
        logger.info(f"Calibration saved to {self._path}")
        return document

    def load(self) -> Optional[Tuple[ControlPoint, ...]]:
        data = self._read_json_file(self._path)
        if data is None:
            return None
        records = data.get("points")
        if not isinstance(records, list) or len(records) != 3:
            logger.warning(f"Ignoring calibration file {self._path}: expected 3 points")
            return None
        try:
            return tuple(ControlPoint.from_dict(r) for r in records)
        except ParcelContractError as e:
            logger.warning(f"Ignoring calibration file {self._path}: {e}")
            return None

    def clear(self) -> bool:
        """Remove the saved document; True when there was one."""
        try:
            os.remove(self._path)
        except FileNotFoundError:
            return False
        logger.info(f"Calibration file removed: {self._path}")
        return True
