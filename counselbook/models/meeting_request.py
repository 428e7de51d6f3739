# counselbook/models/meeting_request.py
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    Time,
)

from counselbook.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class MeetingRequest(Base):
    """
    A student's request for time with a counselor.

    `requested_date` / `requested_time` are copied from the slot when the
    request is created so later slot changes never rewrite history.
    """

    __tablename__ = "meeting_requests"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))

    requester_id = Column(String(36), nullable=False, index=True)
    owner_id = Column(String(36), nullable=False, index=True)

    availability_slot_id = Column(
        String(36),
        ForeignKey("availability_slots.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    agenda = Column(Text, nullable=False)

    status = Column(String(16), nullable=False, default="pending")

    rejection_reason = Column(Text, nullable=True)
    meeting_reference = Column(Text, nullable=True)

    requested_date = Column(Date, nullable=True)
    requested_time = Column(Time, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        Index("idx_meeting_requests_owner_created", "owner_id", "created_at"),
        Index("idx_meeting_requests_requester_created", "requester_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<MeetingRequest id={self.id} owner_id={self.owner_id} "
            f"requester_id={self.requester_id} status={self.status}>"
        )
