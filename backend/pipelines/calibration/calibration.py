"""
Drawing-plane calibration state.

`Calibration` holds the live set of three control points together with a
generation counter; the affine coefficients are solved on first use and
reused until the generation changes.

`CalibrationCapture` walks the operator through capturing points 1, 2 and 3.
Nothing is committed before the third point, and the three points are only
committed (and handed to the persistence hook) when they solve to a usable
transform.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from pipelines.errors import GeometryIssue, ParcelContractError
from .affine import AffineCoefficients, ControlPoint, solve_affine

logger = logging.getLogger(__name__)

# Fallback used until an operator calibrates: three corners of the default
# drawing mapped onto a rough lat/lng box.
DEFAULT_CONTROL_POINTS: Tuple[ControlPoint, ControlPoint, ControlPoint] = (
    ControlPoint(x=100.0, y=100.0, axis1=-23.95, axis2=-46.30),
    ControlPoint(x=900.0, y=100.0, axis1=-23.95, axis2=-46.20),
    ControlPoint(x=100.0, y=700.0, axis1=-23.99, axis2=-46.30),
)

REQUIRED_POINTS = 3


class CalibrationState(str, Enum):
    UNCALIBRATED = "uncalibrated"
    CALIBRATED = "calibrated"


@dataclass(frozen=True)
class ControlPointSet:
    """The three live points, swapped as one unit together with their generation."""

    points: Tuple[ControlPoint, ...]
    generation: int
    calibrated: bool

    @property
    def state(self) -> CalibrationState:
        return CalibrationState.CALIBRATED if self.calibrated else CalibrationState.UNCALIBRATED


class Calibration:
    """
    Live calibration with a lazily solved, generation-keyed coefficient cache.

    Replacing the points bumps the generation; a cached solution from an
    older generation is never returned. Recomputing twice is harmless.
    """

    def __init__(self, points: Optional[Sequence[ControlPoint]] = None, calibrated: bool = False):
        if points is None:
            self._control = ControlPointSet(DEFAULT_CONTROL_POINTS, generation=0, calibrated=False)
        else:
            self._control = ControlPointSet(self._checked(points), generation=0, calibrated=calibrated)
        self._cached: Optional[Tuple[int, Optional[AffineCoefficients]]] = None

    @staticmethod
    def _checked(points: Sequence[ControlPoint]) -> Tuple[ControlPoint, ...]:
        if len(points) != REQUIRED_POINTS:
            raise ParcelContractError(f"Calibration needs exactly {REQUIRED_POINTS} control points, got {len(points)}")
        return tuple(points)

    @property
    def control(self) -> ControlPointSet:
        return self._control

    @property
    def points(self) -> Tuple[ControlPoint, ...]:
        return self._control.points

    @property
    def generation(self) -> int:
        return self._control.generation

    @property
    def state(self) -> CalibrationState:
        return self._control.state

    @property
    def is_calibrated(self) -> bool:
        return self._control.calibrated

    def replace_points(self, points: Sequence[ControlPoint], calibrated: bool = True) -> int:
        """Swap in a new point set; returns the new generation."""
        current = self._control
        self._control = ControlPointSet(self._checked(points), current.generation + 1, calibrated)
        logger.info(f"Calibration points replaced (generation {self._control.generation}, state {self.state.value})")
        return self._control.generation

    def reset(self) -> int:
        """Back to the fallback points (Uncalibrated)."""
        current = self._control
        self._control = ControlPointSet(DEFAULT_CONTROL_POINTS, current.generation + 1, False)
        logger.info(f"Calibration reset to default control points (generation {self._control.generation})")
        return self._control.generation

    def coefficients(self) -> Optional[AffineCoefficients]:
        control = self._control
        cached = self._cached
        if cached is not None and cached[0] == control.generation:
            return cached[1]
        solved = solve_affine(control.points)
        self._cached = (control.generation, solved)
        return solved

    def local_to_geo(self, x: float, y: float) -> Optional[Tuple[float, float]]:
        if not (math.isfinite(x) and math.isfinite(y)):
            return None
        coefficients = self.coefficients()
        if coefficients is None:
            return None
        return coefficients.local_to_geo(x, y)

    def geo_to_local(self, axis1: float, axis2: float) -> Optional[Tuple[float, float]]:
        if not (math.isfinite(axis1) and math.isfinite(axis2)):
            return None
        coefficients = self.coefficients()
        if coefficients is None:
            return None
        return coefficients.geo_to_local(axis1, axis2)

    def status(self) -> Dict[str, Any]:
        coefficients = self.coefficients()
        return {
            "state": self.state.value,
            "calibrated": self.is_calibrated,
            "generation": self.generation,
            "points": [p.to_dict() for p in self.points],
            "coefficients": coefficients.to_dict() if coefficients else None,
        }


@dataclass
class CaptureOutcome:
    captured: int
    complete: bool = False
    committed: bool = False
    issue: Optional[GeometryIssue] = None
    generation: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "captured": self.captured,
            "remaining": max(REQUIRED_POINTS - self.captured, 0) if not self.complete else 0,
            "complete": self.complete,
            "committed": self.committed,
            "issue": self.issue.value if self.issue else None,
            "generation": self.generation,
        }


@dataclass
class CalibrationCapture:
    """
    Three-step capture of control points.

    `on_commit` receives the three points before they go live; when it
    raises, the live calibration is left untouched.
    """

    calibration: Calibration
    on_commit: Optional[Callable[[Tuple[ControlPoint, ...]], None]] = None
    pending: List[ControlPoint] = field(default_factory=list)

    def capture(self, point: ControlPoint) -> CaptureOutcome:
        self.pending.append(point)
        if len(self.pending) < REQUIRED_POINTS:
            logger.debug(f"Captured control point {len(self.pending)} of {REQUIRED_POINTS}")
            return CaptureOutcome(captured=len(self.pending), issue=GeometryIssue.INSUFFICIENT_DATA)

        points = tuple(self.pending)
        self.pending.clear()

        coefficients = solve_affine(points)
        if coefficients is None or not coefficients.is_invertible():
            logger.warning("Captured control points do not give a usable transform; calibration unchanged")
            return CaptureOutcome(captured=REQUIRED_POINTS, complete=True, issue=GeometryIssue.GEOMETRY_DEGENERATE,
                                  generation=self.calibration.generation)

        if self.on_commit is not None:
            self.on_commit(points)
        generation = self.calibration.replace_points(points, calibrated=True)
        return CaptureOutcome(captured=REQUIRED_POINTS, complete=True, committed=True, generation=generation)

    def cancel(self) -> int:
        """Drop any partially captured points; returns how many were dropped."""
        dropped = len(self.pending)
        self.pending.clear()
        return dropped

    @property
    def captured(self) -> int:
        return len(self.pending)
