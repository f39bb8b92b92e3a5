from __future__ import annotations

import math

import pytest

from pipelines.errors import ParcelContractError
from .affine import AffineCoefficients, ControlPoint, solve_affine
from .calibration import DEFAULT_CONTROL_POINTS


def test_control_points_map_onto_their_geo_positions() -> None:
    coefficients = solve_affine(DEFAULT_CONTROL_POINTS)
    assert coefficients is not None
    for p in DEFAULT_CONTROL_POINTS:
        assert coefficients.local_to_geo(p.x, p.y) == pytest.approx((p.axis1, p.axis2))


def test_inverse_round_trip() -> None:
    coefficients = solve_affine(DEFAULT_CONTROL_POINTS)
    geo = coefficients.local_to_geo(432.5, 251.0)
    assert coefficients.geo_to_local(*geo) == pytest.approx((432.5, 251.0))


def test_far_from_origin_points_still_solve() -> None:
    points = [
        ControlPoint(1e6, 1e6, 10.0, 20.0),
        ControlPoint(1e6 + 1, 1e6, 11.0, 20.0),
        ControlPoint(1e6, 1e6 + 1, 10.0, 21.0),
    ]
    coefficients = solve_affine(points)
    assert coefficients is not None
    assert coefficients.a == pytest.approx(1.0)
    assert coefficients.e == pytest.approx(1.0)


def test_collinear_points_give_none() -> None:
    points = [ControlPoint(0, 0, 0, 0), ControlPoint(1, 1, 1, 1), ControlPoint(2, 2, 2, 2)]
    assert solve_affine(points) is None


def test_coincident_points_give_none() -> None:
    points = [ControlPoint(3, 4, 0, 0), ControlPoint(3, 4, 1, 1), ControlPoint(5, 1, 2, 2)]
    assert solve_affine(points) is None


def test_non_finite_point_gives_none() -> None:
    points = [ControlPoint(math.nan, 0, 0, 0), ControlPoint(1, 0, 1, 0), ControlPoint(0, 1, 0, 1)]
    assert solve_affine(points) is None


@pytest.mark.parametrize("count", [0, 2, 4])
def test_wrong_point_count_raises(count: int) -> None:
    points = [ControlPoint(i, i * i, i, i) for i in range(count)]
    with pytest.raises(ParcelContractError):
        solve_affine(points)


def test_singular_linear_part_has_no_inverse() -> None:
    coefficients = AffineCoefficients(a=1, b=2, c=0, d=2, e=4, f=0)
    assert not coefficients.is_invertible()
    assert coefficients.geo_to_local(1.0, 2.0) is None


def test_control_point_record_round_trip() -> None:
    point = ControlPoint(1.5, 2.5, -23.9, -46.3)
    assert ControlPoint.from_dict(point.to_dict()) == point
    with pytest.raises(ParcelContractError):
        ControlPoint.from_dict({"local": {"x": 1}})
