# counselbook/services/availability_store.py
from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from datetime import date as date_type, datetime, time, timezone
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    String,
    Time,
    and_,
    delete,
    exists,
    insert,
    literal,
    select,
    update,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from counselbook.core.errors import (
    AlreadyClaimed,
    InThePast,
    InvalidRange,
    SlotInUse,
    SlotNotFound,
    SlotOverlap,
)
from counselbook.models.availability_slot import AvailabilitySlot
from counselbook.models.meeting_request import MeetingRequest
from counselbook.schemas.meeting_request import LIVE_STATUSES

logger = logging.getLogger(__name__)


class AvailabilityStore:
    """
    Owns counselor availability slots and their `claimed` flag.

    Every mutation of `claimed` (and slot deletion) is a single conditional
    statement evaluated by the database, so concurrent callers racing for
    the same slot are serialized by the store rather than by this process.

    Parameters
    ----------
    db:
        Session used for all reads and writes. `claim_slot` joins the
        caller's transaction; the other mutations commit on their own.
    clock:
        Returns the current local wall-clock time; injectable for tests.
    """

    def __init__(
        self,
        db: AsyncSession,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._db = db
        self._clock = clock or datetime.now

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @staticmethod
    def _slots_stmt(
        counselor_id: str,
        from_date: date_type | None,
        include_claimed: bool,
    ):
        conditions = [AvailabilitySlot.counselor_id == counselor_id]
        if from_date is not None:
            conditions.append(AvailabilitySlot.date >= from_date)
        if not include_claimed:
            conditions.append(AvailabilitySlot.claimed.is_(False))

        return (
            select(AvailabilitySlot)
            .where(and_(*conditions))
            .order_by(
                AvailabilitySlot.date.asc(),
                AvailabilitySlot.start_time.asc(),
                AvailabilitySlot.id.asc(),
            )
            .execution_options(populate_existing=True)
        )

    async def iter_open_slots(
        self,
        counselor_id: str,
        from_date: date_type,
    ) -> AsyncIterator[AvailabilitySlot]:
        """
        Lazily yield the counselor's unclaimed slots on or after `from_date`,
        ordered by (date, start_time).

        Each call issues a fresh query, so the sequence can be restarted by
        simply iterating again.
        """
        stmt = self._slots_stmt(counselor_id, from_date, include_claimed=False)
        result = await self._db.stream_scalars(stmt)
        try:
            async for slot in result:
                yield slot
        finally:
            await result.close()

    async def list_open_slots(
        self,
        counselor_id: str,
        from_date: date_type,
    ) -> list[AvailabilitySlot]:
        return [slot async for slot in self.iter_open_slots(counselor_id, from_date)]

    async def list_slots(
        self,
        counselor_id: str,
        from_date: date_type | None = None,
        include_claimed: bool = True,
    ) -> list[AvailabilitySlot]:
        """
        Counselor management view: every slot (claimed or not) from
        `from_date` onwards, same ordering as the open-slot listing.
        """
        stmt = self._slots_stmt(counselor_id, from_date, include_claimed)
        result = await self._db.execute(stmt)
        return list(result.scalars().all())

    async def get_slot(self, slot_id: str) -> AvailabilitySlot:
        stmt = (
            select(AvailabilitySlot)
            .where(AvailabilitySlot.id == slot_id)
            .execution_options(populate_existing=True)
        )
        result = await self._db.execute(stmt)
        slot = result.scalar_one_or_none()
        if slot is None:
            raise SlotNotFound(f"Availability slot {slot_id} not found.")
        return slot

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def publish_slot(
        self,
        counselor_id: str,
        slot_date: date_type,
        start_time: time,
        end_time: time,
    ) -> AvailabilitySlot:
        """
        Publish a new unclaimed slot for `counselor_id`.

        Raises InvalidRange when start_time >= end_time, InThePast when the
        slot would start before the current time, and SlotOverlap when the
        counselor already has a slot on that date intersecting the range.
        Touching ranges (one ends when the next starts) do not overlap.

        The insert is a single `INSERT ... SELECT ... WHERE NOT EXISTS`, so
        two overlapping publishes cannot both land.
        """
        if start_time >= end_time:
            raise InvalidRange(
                f"Start time {start_time.isoformat()} must be earlier than "
                f"end time {end_time.isoformat()}."
            )

        if datetime.combine(slot_date, start_time) < self._clock():
            raise InThePast(
                f"Slot {slot_date.isoformat()} {start_time.isoformat()} is in the past."
            )

        slot_id = str(uuid4())
        existing = aliased(AvailabilitySlot)
        overlapping = (
            select(existing.id)
            .where(
                existing.counselor_id == counselor_id,
                existing.date == slot_date,
                existing.start_time < end_time,
                existing.end_time > start_time,
            )
            .exists()
        )
        new_row = select(
            literal(slot_id, String),
            literal(counselor_id, String),
            literal(slot_date, Date),
            literal(start_time, Time),
            literal(end_time, Time),
            literal(False, Boolean),
            literal(datetime.now(tz=timezone.utc), DateTime(timezone=True)),
        ).where(~overlapping)
        stmt = insert(AvailabilitySlot).from_select(
            ["id", "counselor_id", "date", "start_time", "end_time", "claimed", "created_at"],
            new_row,
        )

        try:
            result = await self._db.execute(stmt)
        except IntegrityError as exc:
            # Unique (counselor, date, start, end) caught an identical publish
            # that slipped past the NOT EXISTS check.
            await self._db.rollback()
            raise SlotOverlap(
                f"Counselor {counselor_id} already has this slot on {slot_date.isoformat()}."
            ) from exc

        if result.rowcount == 0:
            await self._db.rollback()
            logger.warning(
                "Refused overlapping slot for counselor %s on %s %s-%s",
                counselor_id, slot_date, start_time, end_time,
            )
            raise SlotOverlap(
                f"Slot {start_time.isoformat()}-{end_time.isoformat()} on "
                f"{slot_date.isoformat()} overlaps another slot of counselor {counselor_id}."
            )

        await self._db.commit()
        slot = await self.get_slot(slot_id)

        logger.info(
            "Published slot %s for counselor %s on %s %s-%s",
            slot.id, counselor_id, slot_date, start_time, end_time,
        )
        return slot

    async def remove_slot(self, slot_id: str) -> None:
        """
        Delete an unclaimed slot. A claimed slot raises SlotInUse.

        The delete is conditional on `claimed = false`, so it can never
        remove a slot that a concurrent request has just claimed.
        """
        stmt = (
            delete(AvailabilitySlot)
            .where(
                AvailabilitySlot.id == slot_id,
                AvailabilitySlot.claimed.is_(False),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._db.execute(stmt)

        if result.rowcount == 0:
            await self._db.rollback()
            await self.get_slot(slot_id)
            logger.warning("Refused to remove claimed slot %s", slot_id)
            raise SlotInUse(f"Slot {slot_id} is claimed and cannot be removed.")

        await self._db.commit()
        logger.info("Removed slot %s", slot_id)

    async def claim_slot(self, slot_id: str, counselor_id: str) -> AvailabilitySlot:
        """
        Atomically flip `claimed` from false to true.

        Only the meeting request engine calls this. The update runs inside
        the caller's transaction and is NOT committed here: the engine
        commits it together with the new request, or rolls both back.

        Raises
        ------
        AlreadyClaimed
            The slot exists but another caller claimed it first.
        SlotNotFound
            No slot with this id belongs to `counselor_id`.
        """
        stmt = (
            update(AvailabilitySlot)
            .where(
                AvailabilitySlot.id == slot_id,
                AvailabilitySlot.counselor_id == counselor_id,
                AvailabilitySlot.claimed.is_(False),
            )
            .values(claimed=True)
            .execution_options(synchronize_session=False)
        )
        result = await self._db.execute(stmt)

        slot = await self.get_slot(slot_id)
        if slot.counselor_id != counselor_id:
            raise SlotNotFound(
                f"Availability slot {slot_id} not found for counselor {counselor_id}."
            )
        if result.rowcount == 0:
            raise AlreadyClaimed(f"Slot {slot_id} has already been claimed.")

        return slot

    async def release_slot(self, slot_id: str) -> AvailabilitySlot:
        """
        Administrative path that reopens a claimed slot.

        Allowed only when no pending or accepted request references the
        slot (e.g. after its request was rejected). Releasing an already
        open slot is a no-op.
        """
        live_reference = exists().where(
            MeetingRequest.availability_slot_id == AvailabilitySlot.id,
            MeetingRequest.status.in_([status.value for status in LIVE_STATUSES]),
        )
        stmt = (
            update(AvailabilitySlot)
            .where(
                AvailabilitySlot.id == slot_id,
                AvailabilitySlot.claimed.is_(True),
                ~live_reference,
            )
            .values(claimed=False)
            .execution_options(synchronize_session=False)
        )
        result = await self._db.execute(stmt)

        if result.rowcount == 0:
            await self._db.rollback()
            slot = await self.get_slot(slot_id)
            if not slot.claimed:
                return slot
            logger.warning("Refused to release slot %s with a live request", slot_id)
            raise SlotInUse(f"Slot {slot_id} is referenced by a live meeting request.")

        await self._db.commit()
        logger.info("Released slot %s", slot_id)
        return await self.get_slot(slot_id)
