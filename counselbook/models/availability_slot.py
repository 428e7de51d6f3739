# counselbook/models/availability_slot.py
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Index,
    String,
    Time,
    UniqueConstraint,
)

from counselbook.db.base import Base


class AvailabilitySlot(Base):
    """
    A block of counselor time that a student can request.

    `claimed` flips to true only through the store's conditional update and
    stays true while a pending or accepted request references the slot.
    Slots of one counselor never overlap on the same date; the store
    enforces that on publish and the unique constraint backs it up.
    """

    __tablename__ = "availability_slots"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))

    counselor_id = Column(String(36), nullable=False, index=True)

    date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    claimed = Column(Boolean, nullable=False, default=False)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(tz=timezone.utc),
    )

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_availability_slots_range"),
        UniqueConstraint(
            "counselor_id", "date", "start_time", "end_time",
            name="uq_availability_slots_counselor_range",
        ),
        Index("idx_availability_slots_open", "counselor_id", "claimed", "date", "start_time"),
    )

    def __repr__(self) -> str:
        return (
            f"<AvailabilitySlot id={self.id} counselor_id={self.counselor_id} "
            f"date={self.date} {self.start_time}-{self.end_time} claimed={self.claimed}>"
        )
