# counselbook/api/dependencies/services.py
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from counselbook.db.session import get_db
from counselbook.services.availability_store import AvailabilityStore
from counselbook.services.meeting_engine import MeetingRequestEngine


def get_availability_store(db: AsyncSession = Depends(get_db)) -> AvailabilityStore:
    return AvailabilityStore(db)


def get_meeting_engine(db: AsyncSession = Depends(get_db)) -> MeetingRequestEngine:
    return MeetingRequestEngine(db)
