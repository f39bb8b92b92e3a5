from __future__ import annotations

import pytest
from pydantic import ValidationError

from .response_models import CombinationsRequest, GeoJSONRequest, ParcelPayload, SplitRequest

RING = [[0, 0], [1, 0], [1, 1]]


def test_parcel_payload_defaults() -> None:
    payload = ParcelPayload(id="a", boundary=RING)
    assert payload.model_dump() == {
        "id": "a", "block_key": "", "unit_key": "", "boundary": RING, "attributes": {},
    }


def test_split_points_accept_pairs_and_objects() -> None:
    request = SplitRequest(parcel={"id": "a", "boundary": RING}, point_a=[0, 0.5], point_b={"x": 1, "y": 0.5})
    assert request.point_a == [0, 0.5]
    assert request.point_b == {"x": 1, "y": 0.5}


def test_optional_fields() -> None:
    assert CombinationsRequest(parcels=[], target_area=10).tolerance_pct is None
    assert GeoJSONRequest(parcels=[]).bounds is None


def test_parcel_without_boundary_is_rejected() -> None:
    with pytest.raises(ValidationError):
        ParcelPayload(id="a")
