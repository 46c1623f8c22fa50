"""Location record model."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from locshare._constants import DEFAULT_CENTER, FALLBACK_ID, FALLBACK_NAME


class Coordinates(BaseModel):
    """A single position reading."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    latitude: float = Field(..., allow_inf_nan=False)
    longitude: float = Field(..., allow_inf_nan=False)


class LocationRecord(BaseModel):
    """One participant's shared position.

    Parameters
    ----------
    id : str or None
        Backend-assigned identifier (``_id`` on the wire). ``None`` for a
        record that has not been persisted.
    participant_name : str
        Display label (``username`` on the wire).
    latitude : float
        Latitude in degrees. Any finite number is accepted.
    longitude : float
        Longitude in degrees. Any finite number is accepted.
    captured_at : datetime or None
        When the position was recorded (``timestamp`` on the wire).
        Display only; never used for ordering.
    raw : dict
        Original payload as received.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    id: str | None = Field(default=None, validation_alias=AliasChoices("_id", "id"))
    participant_name: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("username", "participantName", "participant_name"),
    )
    latitude: float = Field(..., allow_inf_nan=False)
    longitude: float = Field(..., allow_inf_nan=False)
    captured_at: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("timestamp", "capturedAt", "captured_at"),
    )
    raw: dict[str, Any] = Field(default_factory=dict, exclude=True)

    @model_validator(mode="before")
    @classmethod
    def _stash_raw(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        if "raw" in values:
            return values
        merged = dict(values)
        merged["raw"] = dict(values)
        return merged

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("participant_name", mode="before")
    @classmethod
    def _strip_name(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(latitude=self.latitude, longitude=self.longitude)

    @property
    def is_placeholder(self) -> bool:
        """Whether this is the synthetic record substituted on fetch failure."""
        return self.id == FALLBACK_ID

    @classmethod
    def fallback(cls) -> LocationRecord:
        """Build the fixed placeholder shown when the backend is unreachable."""
        latitude, longitude = DEFAULT_CENTER
        return cls(
            id=FALLBACK_ID,
            participant_name=FALLBACK_NAME,
            latitude=latitude,
            longitude=longitude,
            captured_at=datetime.now(UTC),
            raw={},
        )
