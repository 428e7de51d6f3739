# counselbook/schemas/availability.py
from datetime import date as date_type, datetime, time

from pydantic import Field

from counselbook.schemas.base import CamelModel


class SlotCreate(CamelModel):
    """
    Payload for publishing a new availability slot (POST /counselors/{id}/slots).

    Range and "not in the past" checks are performed by the availability
    store so that they surface as structured scheduling errors.
    """

    date: date_type = Field(
        ...,
        description="Calendar date of the slot (YYYY-MM-DD).",
        examples=["2026-12-28"],
    )
    start_time: time = Field(
        ...,
        description="Start time of day (HH:MM[:SS]).",
        examples=["09:00:00"],
    )
    end_time: time = Field(
        ...,
        description="End time of day (HH:MM[:SS]); must be after start_time.",
        examples=["09:30:00"],
    )


class SlotRead(CamelModel):
    """
    Public representation of an availability slot.
    """

    id: str = Field(..., description="Opaque slot identifier.")
    counselor_id: str = Field(..., description="Counselor who published the slot.")
    date: date_type
    start_time: time
    end_time: time
    claimed: bool = Field(
        ...,
        description="True once a pending or accepted request references the slot.",
    )
    created_at: datetime | None = Field(
        None,
        description="Timestamp when the slot was published.",
    )
