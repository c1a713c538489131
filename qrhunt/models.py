from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Code(BaseModel):
    """A registered, point-valued scannable item. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=1)
    description: str = Field(..., min_length=1)
    points: int = Field(..., ge=0)


class ScanEvent(BaseModel):
    """One group credited for one code.

    `points` is a snapshot of the code's value at credit time, not a live reference.
    Stored with the `groupName`/`qrId` aliases so the embedded JSON layout stays
    compatible with data written by the browser-only build.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    group_name: str = Field(..., alias="groupName", min_length=1)
    code_id: int = Field(..., alias="qrId", ge=1)
    points: int = Field(..., ge=0)


class HighScoreEntry(BaseModel):
    # Derived from the ledger on every request; never persisted.
    name: str
    points: int
