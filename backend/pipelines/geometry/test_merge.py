from __future__ import annotations

import logging

import pytest

from pipelines.errors import GeometryIssue, ParcelContractError
from pipelines.parcels.models import Parcel
from .merge import merge


def _rect(pid: str, x0: float, y0: float, x1: float, y1: float) -> Parcel:
    return Parcel.from_ring(pid, "1", [(x0, y0), (x1, y0), (x1, y1), (x0, y1)])


def test_adjacent_squares_merge_into_one_ring() -> None:
    result = merge([_rect("a", 0, 0, 1, 1), _rect("b", 1, 0, 2, 1)])

    assert result is not None
    assert not result.is_multi_ring
    assert not result.healed
    assert result.issue is None
    assert result.outline.area == pytest.approx(2.0)
    assert result.centroid == pytest.approx((1.0, 0.5))


def test_small_gap_is_healed() -> None:
    result = merge([_rect("a", 0, 0, 1, 1), _rect("b", 1.05, 0, 2.05, 1)], heal_buffer=0.1)

    assert result is not None
    assert result.healed
    assert not result.is_multi_ring
    assert result.issue is None


def test_far_apart_parcels_stay_multi_ring() -> None:
    result = merge([_rect("a", 0, 0, 1, 1), _rect("b", 10, 0, 11, 1)], heal_buffer=0.1)

    assert result is not None
    assert result.is_multi_ring
    assert result.issue is GeometryIssue.TOPOLOGICAL_GAP
    assert len(result.outline.rings) == 2
    assert result.outline.area == pytest.approx(2.0)
    assert result.to_dict()["issue"] == "topological_gap"


def test_enclosed_hole_is_dropped_from_single_part() -> None:
    frame = [
        _rect("left", 0, 0, 1, 3),
        _rect("right", 2, 0, 3, 3),
        _rect("bottom", 1, 0, 2, 1),
        _rect("top", 1, 2, 2, 3),
    ]
    result = merge(frame)

    assert result is not None
    assert not result.is_multi_ring
    assert result.outline.area == pytest.approx(9.0)


def test_no_area_gives_none() -> None:
    flat = [
        Parcel.from_ring("a", "1", [(0, 0), (1, 1), (2, 2)]),
        Parcel.from_ring("b", "1", [(3, 3), (4, 4), (5, 5)]),
    ]
    assert merge(flat) is None


def test_fewer_than_two_parcels_raises() -> None:
    with pytest.raises(ParcelContractError):
        merge([_rect("a", 0, 0, 1, 1)])


def test_to_dict_shape() -> None:
    result = merge([_rect("a", 0, 0, 1, 1), _rect("b", 1, 0, 2, 1)])
    data = result.to_dict()
    assert set(data) == {"boundary", "centroid", "area", "multi", "healed", "issue"}
    assert isinstance(data["boundary"][0], list) and len(data["boundary"][0]) == 2


def test_disjoint_merge_logs_dropped_holes(caplog: pytest.LogCaptureFixture) -> None:
    frame = [
        _rect("left", 0, 0, 1, 3),
        _rect("right", 2, 0, 3, 3),
        _rect("bottom", 1, 0, 2, 1),
        _rect("top", 1, 2, 2, 3),
        _rect("far", 10, 0, 11, 1),
    ]
    caplog.set_level(logging.DEBUG, logger="pipelines.geometry.merge")
    result = merge(frame, heal_buffer=0.1)

    assert result is not None
    assert result.issue is GeometryIssue.TOPOLOGICAL_GAP
    assert len(result.outline.rings) == 2
    assert "Dropping 1 interior ring(s)" in caplog.text
