"""
Centralized path configuration for backend data storage.

Responsibilities:
- Provide a stable root for parcel_data (overridable with PARCEL_DATA_DIR).
- Expose small helpers for the files that live under it.
"""

from __future__ import annotations

import os
from pathlib import Path


def backend_root() -> Path:
    """Backend source root (the 'backend' directory in the repo)."""
    # backend/config/paths.py -> backend/config -> backend
    return Path(__file__).resolve().parents[1]


def parcel_data_root() -> Path:
    """
    Root for parcel_data.
    - Default: backend/parcel_data.
    - PARCEL_DATA_DIR overrides it (deployments, tests).
    """
    override = os.getenv("PARCEL_DATA_DIR")
    root = Path(override) if override else backend_root() / "parcel_data"
    root.mkdir(parents=True, exist_ok=True)
    return root


# ----- Calibration -----

def calibration_file() -> Path:
    """
    JSON document holding the three saved control points.
    CALIBRATION_FILE points somewhere else entirely (e.g. a config repo checkout).
    """
    override = os.getenv("CALIBRATION_FILE")
    if override:
        return Path(override)
    return parcel_data_root() / "calibration.json"
