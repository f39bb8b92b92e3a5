from __future__ import annotations

import math

import pytest

from pipelines.errors import ParcelContractError
from .models import Parcel, group_by_block, normalize_ring, parse_boundary, parse_point


def test_parse_point_accepts_pairs_and_objects() -> None:
    assert parse_point([1, 2]) == (1.0, 2.0)
    assert parse_point({"x": 3, "y": "4.5"}) == (3.0, 4.5)


def test_parse_point_rejects_garbage() -> None:
    with pytest.raises(ParcelContractError):
        parse_point([1])
    with pytest.raises(ParcelContractError):
        parse_point({"x": 1})


def test_normalize_ring_drops_closing_point() -> None:
    ring = normalize_ring([[0, 0], [1, 0], [1, 1], [0, 0]])
    assert ring == ((0.0, 0.0), (1.0, 0.0), (1.0, 1.0))


def test_normalize_ring_needs_three_points() -> None:
    with pytest.raises(ParcelContractError):
        normalize_ring([[0, 0], [1, 0], [0, 0]])


def test_parse_boundary_detects_multi_ring() -> None:
    single, single_multi = parse_boundary([[0, 0], [1, 0], [1, 1]])
    multi, multi_flag = parse_boundary([
        [[0, 0], [1, 0], [1, 1]],
        [[5, 5], [6, 5], [6, 6]],
    ])
    assert len(single) == 1 and not single_multi
    assert len(multi) == 2 and multi_flag


def test_from_dict_round_trips_to_dict() -> None:
    data = {
        "id": "5-10",
        "block_key": "5",
        "unit_key": "10",
        "boundary": [[0, 0], [10, 0], [10, 10], [0, 10]],
        "attributes": {"area": 100, "owner": "x"},
    }
    parcel = Parcel.from_dict(data)
    assert parcel.area == 100.0
    assert not parcel.is_multi_ring
    assert parcel.to_dict()["boundary"] == [[0.0, 0.0], [10.0, 0.0], [10.0, 10.0], [0.0, 10.0]]
    assert parcel.to_dict()["attributes"]["owner"] == "x"


def test_from_dict_requires_id_and_boundary() -> None:
    with pytest.raises(ParcelContractError):
        Parcel.from_dict({"boundary": [[0, 0], [1, 0], [1, 1]]})


@pytest.mark.parametrize("raw", [None, "abc", True, math.nan, math.inf])
def test_area_is_none_unless_finite_number(raw) -> None:
    parcel = Parcel.from_ring("p", "1", [(0, 0), (1, 0), (1, 1)])
    parcel = Parcel(parcel.id, parcel.block_key, parcel.unit_key, parcel.rings, attributes={"area": raw})
    assert parcel.area is None


def test_multi_ring_flag_follows_ring_count() -> None:
    ring = ((0.0, 0.0), (1.0, 0.0), (1.0, 1.0))
    parcel = Parcel("p", "1", "1", (ring, ring))
    assert parcel.is_multi_ring
    assert len(parcel.boundary) == 2


def test_group_by_block_keeps_input_order() -> None:
    ring = [(0, 0), (1, 0), (1, 1)]
    parcels = [
        Parcel.from_ring("a", "2", ring),
        Parcel.from_ring("b", "1", ring),
        Parcel.from_ring("c", "2", ring),
    ]
    blocks = group_by_block(parcels)
    assert list(blocks) == ["2", "1"]
    assert [p.id for p in blocks["2"]] == ["a", "c"]


@pytest.mark.parametrize("boundary", [5, "0,0 1,0 1,1", {"x": 0, "y": 0}])
def test_non_list_boundary_is_a_contract_error(boundary) -> None:
    with pytest.raises(ParcelContractError):
        Parcel.from_dict({"id": 1, "boundary": boundary})
