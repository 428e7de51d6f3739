# counselbook/services/meeting_engine.py
from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from counselbook.core.errors import (
    AlreadyClaimed,
    EmptyAgenda,
    EmptyReason,
    EmptyReference,
    NotPending,
    RequestNotFound,
    SchedulingError,
    SlotUnavailable,
)
from counselbook.models.availability_slot import AvailabilitySlot
from counselbook.models.meeting_request import MeetingRequest
from counselbook.schemas.meeting_request import (
    CounselorRequestView,
    MeetingRequestStats,
    MeetingRequestStatus,
    RequesterRequestView,
)
from counselbook.services.availability_store import AvailabilityStore
from counselbook.services.projections import MeetingRequestProjections

logger = logging.getLogger(__name__)


class MeetingRequestEngine:
    """
    Drives the meeting request lifecycle.

    State machine
    -------------
    pending  --accept-->  accepted   (terminal)
    pending  --reject-->  rejected   (terminal)

    Every transition is a conditional update guarded by
    `status = 'pending'`, so two concurrent transitions on the same request
    cannot both succeed. Request creation claims the slot and inserts the
    request in one transaction; any failure in between (including task
    cancellation) rolls the claim back.

    Notes
    -----
    - Rejection does not reopen the slot. Reopening is a deliberate
      administrative action (`AvailabilityStore.release_slot`).
    - No operation retries internally; conflicts are reported to the caller.
    """

    def __init__(
        self,
        db: AsyncSession,
        store: AvailabilityStore | None = None,
        projections: MeetingRequestProjections | None = None,
    ) -> None:
        self._db = db
        self._store = store or AvailabilityStore(db)
        self._projections = projections or MeetingRequestProjections(db)

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def create_request(
        self,
        requester_id: str,
        counselor_id: str,
        slot_id: str,
        agenda: str,
    ) -> MeetingRequest:
        """
        Claim `slot_id` and create a pending request against it.

        Raises
        ------
        EmptyAgenda
            Agenda is blank; the slot is not touched.
        SlotUnavailable
            Another request already holds the slot.
        SlotNotFound
            The slot does not exist or belongs to another counselor.
        """
        cleaned_agenda = (agenda or "").strip()
        if not cleaned_agenda:
            raise EmptyAgenda()

        try:
            try:
                slot = await self._store.claim_slot(slot_id, counselor_id)
            except AlreadyClaimed as exc:
                raise SlotUnavailable(f"Slot {slot_id} is no longer available.") from exc

            request = await self._persist_request(
                requester_id=requester_id,
                counselor_id=counselor_id,
                slot=slot,
                agenda=cleaned_agenda,
            )
            await self._db.commit()
        except SchedulingError as exc:
            await self._db.rollback()
            logger.warning("Meeting request for slot %s refused: %s", slot_id, exc.kind)
            raise
        except BaseException:
            # Includes asyncio.CancelledError: the claim must not outlive
            # the request that was supposed to own it.
            logger.exception("Rolling back claim of slot %s", slot_id)
            await self._db.rollback()
            raise

        logger.info(
            "Created meeting request %s (requester=%s counselor=%s slot=%s)",
            request.id, requester_id, counselor_id, slot_id,
        )
        return request

    async def _persist_request(
        self,
        requester_id: str,
        counselor_id: str,
        slot: AvailabilitySlot,
        agenda: str,
    ) -> MeetingRequest:
        now = datetime.now(tz=timezone.utc)
        request = MeetingRequest(
            requester_id=requester_id,
            owner_id=counselor_id,
            availability_slot_id=slot.id,
            agenda=agenda,
            status=MeetingRequestStatus.PENDING.value,
            requested_date=slot.date,
            requested_time=slot.start_time,
            created_at=now,
            updated_at=now,
        )
        self._db.add(request)
        await self._db.flush()
        return request

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def accept(self, request_id: str, meeting_reference: str) -> MeetingRequest:
        """
        pending -> accepted, storing the opaque meeting reference.

        The slot stays claimed.
        """
        reference = (meeting_reference or "").strip()
        if not reference:
            raise EmptyReference()

        return await self._transition(
            request_id,
            MeetingRequestStatus.ACCEPTED,
            meeting_reference=reference,
        )

    async def reject(self, request_id: str, reason: str) -> MeetingRequest:
        """
        pending -> rejected, storing the rejection reason.

        The slot is deliberately left claimed.
        """
        cleaned_reason = (reason or "").strip()
        if not cleaned_reason:
            raise EmptyReason()

        return await self._transition(
            request_id,
            MeetingRequestStatus.REJECTED,
            rejection_reason=cleaned_reason,
        )

    async def _transition(
        self,
        request_id: str,
        target: MeetingRequestStatus,
        **fields: str,
    ) -> MeetingRequest:
        stmt = (
            update(MeetingRequest)
            .where(
                MeetingRequest.id == request_id,
                MeetingRequest.status == MeetingRequestStatus.PENDING.value,
            )
            .values(
                status=target.value,
                updated_at=datetime.now(tz=timezone.utc),
                **fields,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._db.execute(stmt)

        if result.rowcount == 0:
            await self._db.rollback()
            current = await self.get_request(request_id)
            logger.warning(
                "Refused %s of meeting request %s (status=%s)",
                target.value, request_id, current.status,
            )
            raise NotPending(
                f"Meeting request {request_id} is already {current.status}."
            )

        await self._db.commit()
        logger.info("Meeting request %s -> %s", request_id, target.value)
        return await self.get_request(request_id)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_request(self, request_id: str) -> MeetingRequest:
        stmt = (
            select(MeetingRequest)
            .where(MeetingRequest.id == request_id)
            .execution_options(populate_existing=True)
        )
        result = await self._db.execute(stmt)
        request = result.scalar_one_or_none()
        if request is None:
            raise RequestNotFound(f"Meeting request {request_id} not found.")
        return request

    async def list_for_counselor(self, counselor_id: str) -> list[CounselorRequestView]:
        return await self._projections.list_for_counselor(counselor_id)

    async def list_for_requester(self, requester_id: str) -> list[RequesterRequestView]:
        return await self._projections.list_for_requester(requester_id)

    async def stats(self, counselor_id: str) -> MeetingRequestStats:
        return await self._projections.stats(counselor_id)
