# counselbook/models/person.py
from uuid import uuid4

from sqlalchemy import Column, String

from counselbook.db.base import Base


class Person(Base):
    """
    Identity directory entry for a student or a counselor.

    The booking core only reads this table (to join display names and
    emails into request views); accounts are provisioned elsewhere.
    """

    __tablename__ = "people"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    name = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False, unique=True, index=True)
    role = Column(String(32), nullable=False, default="student")

    def __repr__(self) -> str:
        return f"<Person id={self.id} role={self.role} email={self.email}>"
