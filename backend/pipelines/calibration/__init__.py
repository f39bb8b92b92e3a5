"""
Calibration Module
Three-point affine calibration between the drawing plane and geographic coordinates
"""
from .affine import ControlPoint, AffineCoefficients, solve_affine
from .calibration import Calibration, CalibrationCapture, CalibrationState, DEFAULT_CONTROL_POINTS

__all__ = ["ControlPoint", "AffineCoefficients", "solve_affine", "Calibration", "CalibrationCapture", "CalibrationState", "DEFAULT_CONTROL_POINTS"]
