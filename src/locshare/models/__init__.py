"""Data models for locshare."""

from locshare.models.location import Coordinates, LocationRecord

__all__ = [
    "Coordinates",
    "LocationRecord",
]
