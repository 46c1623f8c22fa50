"""Render-ready projections of location records."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from locshare.models.location import LocationRecord


@dataclass(frozen=True)
class MapMarker:
    """A point plus popup label, as consumed by the map renderer."""

    key: str | None
    latitude: float
    longitude: float
    title: str
    label: str


def to_marker(record: LocationRecord) -> MapMarker:
    return MapMarker(
        key=record.id,
        latitude=record.latitude,
        longitude=record.longitude,
        title=record.participant_name,
        label=f"Lat: {record.latitude}, Lng: {record.longitude}",
    )


def to_markers(records: Iterable[LocationRecord]) -> list[MapMarker]:
    return [to_marker(record) for record in records]


def describe(record: LocationRecord) -> str:
    """One list line: ``name: Lat x, Lng y (Shared at ...)``."""
    line = f"{record.participant_name}: Lat {record.latitude}, Lng {record.longitude}"
    if record.captured_at is not None:
        line += f" (Shared at {record.captured_at.strftime('%Y-%m-%d %H:%M:%S')})"
    return line
