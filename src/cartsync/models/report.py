"""Outcome of a reconciliation attempt."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field


class MergeReport(BaseModel):
    """Result of merging the offline cart into an identity cart.

    Parameters
    ----------
    identity_id : str
        Identity whose cart received the merge.
    added : dict
        Item id to the quantity actually added to the identity cart.
    skipped : list
        Items the catalog no longer sells; they contributed nothing.
    capped : list
        Items whose combined quantity exceeded availability.
    error : str or None
        Description of the failure that aborted the merge, if any.
    """

    model_config = ConfigDict(frozen=True)

    identity_id: str
    added: dict[str, int] = Field(default_factory=dict)
    skipped: list[str] = Field(default_factory=list)
    capped: list[str] = Field(default_factory=list)
    error: str | None = None
    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    finished_at: datetime | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None
