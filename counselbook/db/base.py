# counselbook/db/base.py
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models in the Counselbook service.
    """
    pass


# Import ORM models so that Base.metadata is aware of them
# This import should stay at the bottom to avoid circular dependencies.
import counselbook.models.person  # noqa: E402,F401
import counselbook.models.availability_slot  # noqa: E402,F401
import counselbook.models.meeting_request  # noqa: E402,F401
