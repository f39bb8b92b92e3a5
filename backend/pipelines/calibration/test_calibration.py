from __future__ import annotations

from typing import List, Tuple

import pytest

from pipelines.errors import GeometryIssue, ParcelContractError
from .affine import ControlPoint
from .calibration import DEFAULT_CONTROL_POINTS, Calibration, CalibrationCapture, CalibrationState

# axis1 = y, axis2 = x
SWAPPED = (
    ControlPoint(0, 0, 0, 0),
    ControlPoint(1, 0, 0, 1),
    ControlPoint(0, 1, 1, 0),
)


def test_starts_uncalibrated_on_default_points() -> None:
    calibration = Calibration()
    assert calibration.state is CalibrationState.UNCALIBRATED
    assert calibration.points == DEFAULT_CONTROL_POINTS
    assert calibration.generation == 0
    assert calibration.local_to_geo(100, 100) == pytest.approx((-23.95, -46.30))


def test_replace_points_bumps_generation_and_refreshes_transform() -> None:
    calibration = Calibration()
    before = calibration.local_to_geo(3, 7)

    generation = calibration.replace_points(SWAPPED)

    assert generation == 1
    assert calibration.is_calibrated
    assert calibration.local_to_geo(3, 7) == pytest.approx((7, 3))
    assert calibration.local_to_geo(3, 7) != pytest.approx(before)


def test_coefficients_are_cached_per_generation() -> None:
    calibration = Calibration(SWAPPED, calibrated=True)
    first = calibration.coefficients()
    assert calibration.coefficients() is first
    calibration.replace_points(SWAPPED)
    assert calibration.coefficients() is not first


def test_reset_returns_to_defaults() -> None:
    calibration = Calibration(SWAPPED, calibrated=True)
    assert calibration.reset() == 1
    assert calibration.state is CalibrationState.UNCALIBRATED
    assert calibration.points == DEFAULT_CONTROL_POINTS


def test_degenerate_live_points_give_no_transform() -> None:
    collinear = (ControlPoint(0, 0, 0, 0), ControlPoint(1, 1, 1, 1), ControlPoint(2, 2, 2, 2))
    calibration = Calibration(collinear, calibrated=True)
    assert calibration.local_to_geo(1, 2) is None
    assert calibration.geo_to_local(1, 2) is None
    assert calibration.status()["coefficients"] is None


def test_non_finite_input_gives_none() -> None:
    calibration = Calibration()
    assert calibration.local_to_geo(float("nan"), 1) is None
    assert calibration.geo_to_local(1, float("inf")) is None


def test_wrong_point_count_raises() -> None:
    with pytest.raises(ParcelContractError):
        Calibration(SWAPPED[:2])


def test_status_shape() -> None:
    status = Calibration().status()
    assert status["state"] == "uncalibrated"
    assert status["calibrated"] is False
    assert len(status["points"]) == 3
    assert set(status["coefficients"]) == {"a", "b", "c", "d", "e", "f"}


def test_capture_commits_on_third_point() -> None:
    calibration = Calibration()
    committed: List[Tuple[ControlPoint, ...]] = []
    capture = CalibrationCapture(calibration, on_commit=committed.append)

    first = capture.capture(SWAPPED[0])
    second = capture.capture(SWAPPED[1])
    assert (first.captured, second.captured) == (1, 2)
    assert second.to_dict()["remaining"] == 1
    assert not second.committed
    assert calibration.generation == 0

    third = capture.capture(SWAPPED[2])
    assert third.complete and third.committed
    assert third.generation == 1
    assert committed == [SWAPPED]
    assert calibration.points == SWAPPED
    assert calibration.is_calibrated
    assert capture.captured == 0


def test_capture_rejects_collinear_points() -> None:
    calibration = Calibration()
    capture = CalibrationCapture(calibration)
    for point in (ControlPoint(0, 0, 0, 0), ControlPoint(1, 1, 1, 1)):
        capture.capture(point)
    outcome = capture.capture(ControlPoint(2, 2, 2, 2))

    assert outcome.complete
    assert not outcome.committed
    assert outcome.issue is GeometryIssue.GEOMETRY_DEGENERATE
    assert calibration.generation == 0
    assert calibration.points == DEFAULT_CONTROL_POINTS
    assert capture.captured == 0


def test_failed_commit_hook_leaves_calibration_untouched() -> None:
    calibration = Calibration()

    def refuse(points) -> None:
        raise OSError("disk full")

    capture = CalibrationCapture(calibration, on_commit=refuse)
    capture.capture(SWAPPED[0])
    capture.capture(SWAPPED[1])
    with pytest.raises(OSError):
        capture.capture(SWAPPED[2])

    assert calibration.generation == 0
    assert calibration.points == DEFAULT_CONTROL_POINTS


def test_cancel_drops_pending_points() -> None:
    calibration = Calibration()
    capture = CalibrationCapture(calibration)
    capture.capture(SWAPPED[0])
    capture.capture(SWAPPED[1])

    assert capture.cancel() == 2
    assert capture.captured == 0
    assert calibration.generation == 0
