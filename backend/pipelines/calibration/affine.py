"""
Affine Calibration Solver
Fits the transform between the local drawing plane and geographic
coordinates from exactly three control points:

    geo1 = a*x + b*y + c
    geo2 = d*x + e*y + f

Three non-collinear points determine the six coefficients exactly
(Cramer's rule on the 3x3 system). Collinear points, or a fit whose 2x2
linear part cannot be inverted, are reported as "no result".
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

from pipelines.errors import ParcelContractError

logger = logging.getLogger(__name__)

# Relative size below which a determinant is treated as zero
DEGENERACY_EPSILON = 1e-9


@dataclass(frozen=True)
class ControlPoint:
    """One pairing of a drawing-plane position with its geographic position."""

    x: float
    y: float
    axis1: float  # latitude in the default setup
    axis2: float  # longitude in the default setup

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ControlPoint":
        """Parse the persisted record shape {local: {x, y}, geo: {axis1, axis2}}."""
        try:
            local = data["local"]
            geo = data["geo"]
            return cls(
                x=float(local["x"]),
                y=float(local["y"]),
                axis1=float(geo["axis1"]),
                axis2=float(geo["axis2"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ParcelContractError(f"Invalid control point record {data!r}: {e}")

    def to_dict(self) -> Dict[str, Any]:
        return {"local": {"x": self.x, "y": self.y}, "geo": {"axis1": self.axis1, "axis2": self.axis2}}

    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in (self.x, self.y, self.axis1, self.axis2))


def _negligible(value: float, scale: float) -> bool:
    return scale == 0.0 or abs(value) <= DEGENERACY_EPSILON * scale


@dataclass(frozen=True)
class AffineCoefficients:
    a: float
    b: float
    c: float
    d: float
    e: float
    f: float

    def as_tuple(self) -> Tuple[float, float, float, float, float, float]:
        return (self.a, self.b, self.c, self.d, self.e, self.f)

    def to_dict(self) -> Dict[str, float]:
        return {"a": self.a, "b": self.b, "c": self.c, "d": self.d, "e": self.e, "f": self.f}

    def local_to_geo(self, x: float, y: float) -> Tuple[float, float]:
        return (self.a * x + self.b * y + self.c, self.d * x + self.e * y + self.f)

    def is_invertible(self) -> bool:
        det = self.a * self.e - self.b * self.d
        return not _negligible(det, abs(self.a * self.e) + abs(self.b * self.d))

    def geo_to_local(self, axis1: float, axis2: float) -> Optional[Tuple[float, float]]:
        """Invert the linear part [[a, b], [d, e]]; None when it is singular."""
        if not self.is_invertible():
            logger.warning("Affine transform is not invertible")
            return None
        det = self.a * self.e - self.b * self.d
        dx = axis1 - self.c
        dy = axis2 - self.f
        return ((self.e * dx - self.b * dy) / det, (-self.d * dx + self.a * dy) / det)


def solve_affine(points: Sequence[ControlPoint]) -> Optional[AffineCoefficients]:
    """
    Solve the six affine coefficients from three control points.

    Args:
        points: Exactly three control points

    Returns:
        AffineCoefficients, or None when the points are collinear (or
        coincident) or non-finite
    """
    if len(points) != 3:
        raise ParcelContractError(f"Affine calibration needs exactly 3 control points, got {len(points)}")
    if not all(p.is_finite() for p in points):
        logger.warning("Calibration rejected: non-finite control point")
        return None

    p1, p2, p3 = points
    # Work relative to p1 so the determinant does not depend on where the
    # points sit in the plane.
    x2, y2 = p2.x - p1.x, p2.y - p1.y
    x3, y3 = p3.x - p1.x, p3.y - p1.y
    det = x2 * y3 - x3 * y2
    if _negligible(det, abs(x2 * y3) + abs(x3 * y2)):
        logger.warning("Calibration rejected: control points are collinear")
        return None

    def solve_axis(v1: float, v2: float, v3: float) -> Tuple[float, float, float]:
        dv2, dv3 = v2 - v1, v3 - v1
        gx = (dv2 * y3 - dv3 * y2) / det
        gy = (x2 * dv3 - x3 * dv2) / det
        return gx, gy, v1 - gx * p1.x - gy * p1.y

    a, b, c = solve_axis(p1.axis1, p2.axis1, p3.axis1)
    d, e, f = solve_axis(p1.axis2, p2.axis2, p3.axis2)
    coefficients = AffineCoefficients(a, b, c, d, e, f)

    if not all(math.isfinite(v) for v in coefficients.as_tuple()):
        logger.error(f"Calibration produced non-finite coefficients: {coefficients}")
        return None

    logger.debug(f"Calibration solved: {coefficients.to_dict()}")
    return coefficients
