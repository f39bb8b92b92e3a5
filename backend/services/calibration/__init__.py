from .calibration_store import CalibrationStore
from .calibration_singleton import CalibrationService, get_calibration_service, set_calibration_service

__all__ = ["CalibrationStore", "CalibrationService", "get_calibration_service", "set_calibration_service"]
