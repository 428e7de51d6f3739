# counselbook/services/identity_directory.py
from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from counselbook.models.person import Person


class IdentityDirectory:
    """
    Read-only view over the `people` table.

    Resolves student and counselor ids to their public display fields. The
    booking core never writes through this class.
    """

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def resolve_many(self, person_ids: Iterable[str]) -> dict[str, Person]:
        """
        Look up several identities in one round trip.

        Unknown ids are simply absent from the returned mapping.
        """
        wanted = {person_id for person_id in person_ids if person_id}
        if not wanted:
            return {}

        result = await self._db.execute(select(Person).where(Person.id.in_(wanted)))
        return {person.id: person for person in result.scalars().all()}
