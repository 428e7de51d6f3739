# counselbook/services/projections.py
from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from counselbook.models.availability_slot import AvailabilitySlot
from counselbook.models.meeting_request import MeetingRequest
from counselbook.models.person import Person
from counselbook.schemas.meeting_request import (
    CounselorRequestView,
    MeetingRequestRead,
    MeetingRequestStats,
    MeetingRequestStatus,
    PartyIdentity,
    RequesterRequestView,
)
from counselbook.services.identity_directory import IdentityDirectory

logger = logging.getLogger(__name__)


def _party_identity(party_id: str, person: Person | None) -> PartyIdentity:
    if person is None:
        logger.warning("Identity %s not found in directory; returning partial identity", party_id)
        return PartyIdentity(id=party_id, found=False)
    return PartyIdentity(id=person.id, name=person.name, email=person.email)


def _slot_fields(slot: AvailabilitySlot | None) -> dict:
    if slot is None:
        return {"slot_date": None, "slot_start_time": None, "slot_end_time": None}
    return {
        "slot_date": slot.date,
        "slot_start_time": slot.start_time,
        "slot_end_time": slot.end_time,
    }


class MeetingRequestProjections:
    """
    Read-side composition for meeting requests.

    Each view joins a request with the identity of the *other* party and
    with the display fields of its slot. Nothing here writes; a missing
    identity or slot produces a partial view rather than dropping the row.
    """

    def __init__(
        self,
        db: AsyncSession,
        directory: IdentityDirectory | None = None,
    ) -> None:
        self._db = db
        self._directory = directory or IdentityDirectory(db)

    async def _requests_with_slots(self, *conditions) -> list[tuple[MeetingRequest, AvailabilitySlot | None]]:
        stmt = (
            select(MeetingRequest, AvailabilitySlot)
            .outerjoin(
                AvailabilitySlot,
                AvailabilitySlot.id == MeetingRequest.availability_slot_id,
            )
            .where(*conditions)
            .order_by(MeetingRequest.created_at.desc(), MeetingRequest.id.desc())
            .execution_options(populate_existing=True)
        )
        result = await self._db.execute(stmt)
        return [(request, slot) for request, slot in result.all()]

    async def list_for_counselor(self, counselor_id: str) -> list[CounselorRequestView]:
        """
        The counselor's inbound queue, newest first, with requester identity.
        """
        rows = await self._requests_with_slots(MeetingRequest.owner_id == counselor_id)
        people = await self._directory.resolve_many(request.requester_id for request, _ in rows)

        return [
            CounselorRequestView(
                **MeetingRequestRead.model_validate(request).model_dump(),
                **_slot_fields(slot),
                requester=_party_identity(request.requester_id, people.get(request.requester_id)),
            )
            for request, slot in rows
        ]

    async def list_for_requester(self, requester_id: str) -> list[RequesterRequestView]:
        """
        A student's own requests, newest first, with counselor identity.
        """
        rows = await self._requests_with_slots(MeetingRequest.requester_id == requester_id)
        people = await self._directory.resolve_many(request.owner_id for request, _ in rows)

        return [
            RequesterRequestView(
                **MeetingRequestRead.model_validate(request).model_dump(),
                **_slot_fields(slot),
                counselor=_party_identity(request.owner_id, people.get(request.owner_id)),
            )
            for request, slot in rows
        ]

    async def stats(self, counselor_id: str) -> MeetingRequestStats:
        """
        Status counts over the same rows `list_for_counselor` returns.
        """
        stmt = (
            select(MeetingRequest.status, func.count(MeetingRequest.id))
            .where(MeetingRequest.owner_id == counselor_id)
            .group_by(MeetingRequest.status)
        )
        result = await self._db.execute(stmt)

        counts = {status: 0 for status in MeetingRequestStatus}
        for status_value, count in result.all():
            # Only the engine writes status, so unknown values raise here.
            counts[MeetingRequestStatus(status_value)] += count

        pending = counts[MeetingRequestStatus.PENDING]
        accepted = counts[MeetingRequestStatus.ACCEPTED]
        rejected = counts[MeetingRequestStatus.REJECTED]

        return MeetingRequestStats(
            total=pending + accepted + rejected,
            pending=pending,
            accepted=accepted,
            rejected=rejected,
        )
