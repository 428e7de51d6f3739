# tests/test_projections.py
from datetime import time

import pytest

from counselbook.db.session import AsyncSessionLocal
from counselbook.services.availability_store import AvailabilityStore
from counselbook.services.identity_directory import IdentityDirectory
from counselbook.services.meeting_engine import MeetingRequestEngine
from counselbook.services.projections import MeetingRequestProjections

from conftest import COUNSELOR_ID, STUDENT_ID, future_day


async def _book(requester_id: str, start: time, end: time, agenda: str) -> str:
    async with AsyncSessionLocal() as session:
        slot = await AvailabilityStore(session).publish_slot(COUNSELOR_ID, future_day(), start, end)
        request = await MeetingRequestEngine(session).create_request(
            requester_id, COUNSELOR_ID, slot.id, agenda
        )
        return request.id


@pytest.mark.asyncio
async def test_counselor_queue_is_newest_first_with_requester_identity(people):
    first_id = await _book(STUDENT_ID, time(9, 0), time(9, 30), "first")
    second_id = await _book(STUDENT_ID, time(10, 0), time(10, 30), "second")

    async with AsyncSessionLocal() as session:
        views = await MeetingRequestProjections(session).list_for_counselor(COUNSELOR_ID)

    assert [view.id for view in views] == [second_id, first_id]

    newest = views[0]
    assert newest.requester.id == STUDENT_ID
    assert newest.requester.name == "Sam Student"
    assert newest.requester.email == "sam@school.example"
    assert newest.requester.found is True
    assert newest.slot_date == future_day()
    assert newest.slot_start_time == time(10, 0)
    assert newest.slot_end_time == time(10, 30)


@pytest.mark.asyncio
async def test_requester_view_carries_counselor_identity(people):
    request_id = await _book(STUDENT_ID, time(9, 0), time(9, 30), "discuss apps")

    async with AsyncSessionLocal() as session:
        views = await MeetingRequestProjections(session).list_for_requester(STUDENT_ID)
        assert await MeetingRequestProjections(session).list_for_requester("nobody") == []

    assert [view.id for view in views] == [request_id]
    assert views[0].counselor.name == "Dana Counselor"
    assert views[0].counselor.email == "dana@school.example"
    assert views[0].agenda == "discuss apps"


@pytest.mark.asyncio
async def test_missing_identity_yields_partial_view_not_dropped_row(people):
    """
    A requester unknown to the directory still shows up in the queue, with
    only the id filled in.
    """
    await _book("ghost-student", time(9, 0), time(9, 30), "still here")

    async with AsyncSessionLocal() as session:
        views = await MeetingRequestProjections(session).list_for_counselor(COUNSELOR_ID)

    assert len(views) == 1
    assert views[0].requester.id == "ghost-student"
    assert views[0].requester.found is False
    assert views[0].requester.name is None
    assert views[0].requester.email is None


@pytest.mark.asyncio
async def test_stats_match_the_counselor_queue():
    pending_id = await _book("student-a", time(9, 0), time(9, 30), "a")
    accepted_id = await _book("student-b", time(10, 0), time(10, 30), "b")
    rejected_id = await _book("student-c", time(11, 0), time(11, 30), "c")
    assert pending_id

    async with AsyncSessionLocal() as session:
        engine = MeetingRequestEngine(session)
        await engine.accept(accepted_id, "https://call.example/b")
        await engine.reject(rejected_id, "conflict")

        stats = await engine.stats(COUNSELOR_ID)
        queue = await engine.list_for_counselor(COUNSELOR_ID)
        empty = await engine.stats("counselor-without-requests")

    assert (stats.total, stats.pending, stats.accepted, stats.rejected) == (3, 1, 1, 1)
    assert stats.total == len(queue)
    assert (empty.total, empty.pending, empty.accepted, empty.rejected) == (0, 0, 0, 0)


@pytest.mark.asyncio
async def test_identity_directory_resolves_known_ids_only(people):
    async with AsyncSessionLocal() as session:
        directory = IdentityDirectory(session)

        resolved = await directory.resolve_many([COUNSELOR_ID, STUDENT_ID, "unknown", ""])

        assert set(resolved) == {COUNSELOR_ID, STUDENT_ID}
        assert resolved[COUNSELOR_ID].name == "Dana Counselor"
        assert await directory.resolve_many([]) == {}
