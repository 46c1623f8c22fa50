"""Committed store changes.

Every mutation the store accepts is described by one of these events and
handed to subscribers. Only the state/store layer creates them.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from locshare.models.location import LocationRecord


class ChangeSource(StrEnum):
    SNAPSHOT = "snapshot"
    FALLBACK = "fallback"
    STREAM = "stream"
    LOCAL = "local"


class ChangeKind(StrEnum):
    REPLACE = "replace"
    INSERT = "insert"
    UPDATE = "update"


class StoreChange(BaseModel):
    """A mutation committed by :class:`locshare.state.store.LocationStore`."""

    model_config = ConfigDict(frozen=True)

    kind: ChangeKind
    source: ChangeSource
    record: LocationRecord | None = Field(
        default=None,
        description="Inserted or updated record; None for a full replacement.",
    )
    position: int | None = Field(default=None, description="Index of the affected record in display order.")
    size: int = Field(..., description="Collection size after the change.")
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
