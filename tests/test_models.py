"""Tests for LocationRecord parsing."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from locshare.models.location import LocationRecord


def test_parses_backend_document() -> None:
    payload = {
        "_id": "665f1c2e9b1d",
        "username": "alice",
        "latitude": 48.8566,
        "longitude": 2.3522,
        "timestamp": "2025-05-01T10:00:00.000Z",
        "__v": 0,
    }
    record = LocationRecord.model_validate(payload)

    assert record.id == "665f1c2e9b1d"
    assert record.participant_name == "alice"
    assert record.latitude == pytest.approx(48.8566)
    assert record.captured_at == datetime(2025, 5, 1, 10, 0, tzinfo=UTC)
    assert record.raw == payload
    assert not record.is_placeholder


def test_accepts_plain_id_and_numeric_strings() -> None:
    record = LocationRecord.model_validate({"id": 42, "username": " bob ", "latitude": "1.5", "longitude": "-2"})

    assert record.id == "42"
    assert record.participant_name == "bob"
    assert (record.latitude, record.longitude) == (1.5, -2.0)
    assert record.captured_at is None


def test_tolerates_out_of_range_but_finite_coordinates() -> None:
    record = LocationRecord.model_validate({"_id": "x", "username": "c", "latitude": 1000, "longitude": -720})
    assert (record.latitude, record.longitude) == (1000, -720)


@pytest.mark.parametrize("bad", [float("nan"), float("inf")])
def test_rejects_non_finite_coordinates(bad: float) -> None:
    with pytest.raises(ValidationError):
        LocationRecord.model_validate({"_id": "x", "username": "c", "latitude": bad, "longitude": 0})


def test_rejects_blank_name() -> None:
    with pytest.raises(ValidationError):
        LocationRecord.model_validate({"_id": "x", "username": "   ", "latitude": 0, "longitude": 0})


def test_fallback_record() -> None:
    record = LocationRecord.fallback()

    assert record.is_placeholder
    assert record.participant_name == "Fallback User"
    assert (record.latitude, record.longitude) == (51.505, -0.09)
