# counselbook/schemas/meeting_request.py
from datetime import date as date_type, datetime, time
from enum import Enum

from pydantic import Field, field_validator

from counselbook.core.config import get_settings
from counselbook.schemas.base import CamelModel


class MeetingRequestStatus(str, Enum):
    """
    Lifecycle states of a meeting request. ACCEPTED and REJECTED are terminal.
    """

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not MeetingRequestStatus.PENDING


LIVE_STATUSES = (MeetingRequestStatus.PENDING, MeetingRequestStatus.ACCEPTED)


# --------------------------------------------------------------------------
# Inbound payloads
# --------------------------------------------------------------------------

class MeetingRequestCreate(CamelModel):
    """
    Payload for POST /meeting-requests.

    Emptiness of the agenda is checked by the engine (EmptyAgenda); only
    the structural shape is validated here.
    """

    requester_id: str = Field(..., description="Student submitting the request.")
    counselor_id: str = Field(..., description="Counselor who owns the slot.")
    slot_id: str = Field(..., description="Availability slot being requested.")
    agenda: str = Field(
        ...,
        description="What the student wants to discuss.",
        examples=["discuss apps"],
    )

    @field_validator("agenda")
    @classmethod
    def validate_agenda_length(cls, value: str) -> str:
        limit = get_settings().MAX_AGENDA_LENGTH
        if len(value.strip()) > limit:
            raise ValueError(f"Agenda must be {limit} characters or fewer.")
        return value


class AcceptPayload(CamelModel):
    """
    Payload for POST /meeting-requests/{id}/accept.

    When `meeting_reference` is omitted a link is issued by the service.
    """

    meeting_reference: str | None = Field(
        default=None,
        description="Opaque meeting join reference, e.g. a call URL.",
        examples=["https://call.example/x"],
    )


class RejectPayload(CamelModel):
    reason: str = Field(
        ...,
        description="Why the counselor declined the request.",
        examples=["conflict"],
    )

    @field_validator("reason")
    @classmethod
    def validate_reason_length(cls, value: str) -> str:
        limit = get_settings().MAX_REASON_LENGTH
        if len(value.strip()) > limit:
            raise ValueError(f"Reason must be {limit} characters or fewer.")
        return value


# --------------------------------------------------------------------------
# Read models
# --------------------------------------------------------------------------

class MeetingRequestRead(CamelModel):
    """
    Public representation of a stored meeting request.
    """

    id: str
    requester_id: str
    owner_id: str
    availability_slot_id: str | None = None
    agenda: str
    status: MeetingRequestStatus
    rejection_reason: str | None = None
    meeting_reference: str | None = None
    requested_date: date_type | None = None
    requested_time: time | None = None
    created_at: datetime
    updated_at: datetime


class PartyIdentity(CamelModel):
    """
    Public identity of the other party in a request view.

    `found` is false when the directory no longer knows the id; the view
    still carries the id so the record is never dropped.
    """

    id: str
    name: str | None = None
    email: str | None = None
    found: bool = True


class _RequestViewBase(MeetingRequestRead):
    slot_date: date_type | None = Field(
        None,
        description="Date of the referenced slot, if it still exists.",
    )
    slot_start_time: time | None = None
    slot_end_time: time | None = None


class CounselorRequestView(_RequestViewBase):
    """
    A request as seen in the counselor's inbound queue.
    """

    requester: PartyIdentity


class RequesterRequestView(_RequestViewBase):
    """
    A request as seen by the student who submitted it.
    """

    counselor: PartyIdentity


class MeetingRequestStats(CamelModel):
    """
    Aggregate status counts over one counselor's requests.
    """

    total: int = Field(..., examples=[4])
    pending: int = Field(..., examples=[2])
    accepted: int = Field(..., examples=[1])
    rejected: int = Field(..., examples=[1])
