"""
Calibration Singleton
=====================

Process-wide calibration: the live `Calibration`, the capture in progress
and the store they persist through. Built lazily on first use, loading the
saved control points once.
"""

from __future__ import annotations

import logging
from typing import Optional

from pipelines.calibration.affine import solve_affine
from pipelines.calibration.calibration import Calibration, CalibrationCapture
from .calibration_store import CalibrationStore

logger = logging.getLogger(__name__)


def _usable(points) -> bool:
    coefficients = solve_affine(points)
    return coefficients is not None and coefficients.is_invertible()


class CalibrationService:
    def __init__(self, store: Optional[CalibrationStore] = None):
        self.store = store or CalibrationStore()
        saved = self.store.load()
        if saved is not None and not _usable(saved):
            logger.warning(f"Saved control points in {self.store.path} do not give an invertible transform; ignoring them")
            saved = None
        if saved is not None:
            self.calibration = Calibration(saved, calibrated=True)
            logger.info(f"Calibration loaded from {self.store.path}")
        else:
            self.calibration = Calibration()
            logger.warning("Using default control points (uncalibrated); map positions may be off")
        self.capture = CalibrationCapture(self.calibration, on_commit=self.store.save)

    def reset(self) -> int:
        """Forget the saved calibration and fall back to the default points."""
        self.capture.cancel()
        self.store.clear()
        return self.calibration.reset()

    def export_document(self):
        return self.store.build_document(self.calibration.points)


_calibration_instance: Optional[CalibrationService] = None


def get_calibration_service() -> CalibrationService:
    """Lazily construct and return the singleton CalibrationService."""
    global _calibration_instance
    if _calibration_instance is None:
        _calibration_instance = CalibrationService()
    return _calibration_instance


def set_calibration_service(service: Optional[CalibrationService]) -> None:
    """Swap the singleton (tests, alternative stores); None forces a reload."""
    global _calibration_instance
    _calibration_instance = service
