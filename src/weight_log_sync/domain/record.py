"""
Weight record domain models.

This module defines the fixed three-column record stored in the remote
CSV file, the single pending edit a save carries, and the outcome types
reported by the reconciler and the sync client.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class EditOutcome(str, Enum):
    """Result of merging a pending input into the record set."""

    ACCEPTED = "accepted"
    REJECTED = "rejected"


class ReadOutcome(str, Enum):
    """Result of a successful versioned read."""

    FOUND = "found"
    NOT_FOUND = "not_found"


class SyncState(str, Enum):
    """Phase of the synchronization cycle."""

    IDLE = "idle"
    READING = "reading"
    WRITING = "writing"


class WeightRecord(BaseModel):
    """
    One row of the data file.

    At most one record exists per (date, name) pair in the authoritative set.
    A weight of NaN means the stored value could not be parsed and is
    treated as no data.
    """

    date: str = Field(description="Calendar date (YYYY-MM-DD)")
    name: str = Field(description="Identity label the value belongs to")
    weight: float = Field(description="Recorded value")

    def key(self) -> tuple[str, str]:
        """Return the (date, name) uniqueness key."""
        return (self.date, self.name)


class PendingEdit(BaseModel):
    """The caller's most recent unsaved input, replayed after a conflict."""

    date: str
    name: str
    raw_value: str | float

    model_config = ConfigDict(frozen=True)


class SaveResult(BaseModel):
    """Outcome of a successful write."""

    revision_token: str = Field(description="Revision token of the written file")
    attempts: int = Field(description="Number of write requests issued")

    @property
    def retries(self) -> int:
        """Number of conflict-triggered retries."""
        return self.attempts - 1
