# tests/test_meeting_requests_api.py
from datetime import time
from http import HTTPStatus

from conftest import COUNSELOR_ID, STUDENT_ID, future_day, slot_payload


def _publish(client, start: time = time(9, 0), end: time = time(9, 30)) -> dict:
    response = client.post(f"/counselors/{COUNSELOR_ID}/slots", json=slot_payload(start=start, end=end))
    assert response.status_code == HTTPStatus.CREATED
    return response.json()


def _request_payload(slot_id: str, agenda: str = "discuss apps", requester_id: str = STUDENT_ID) -> dict:
    return {
        "requesterId": requester_id,
        "counselorId": COUNSELOR_ID,
        "slotId": slot_id,
        "agenda": agenda,
    }


def _create(client, slot_id: str, **kwargs) -> dict:
    response = client.post("/meeting-requests", json=_request_payload(slot_id, **kwargs))
    assert response.status_code == HTTPStatus.CREATED
    return response.json()


def _stats(client) -> dict:
    response = client.get(f"/counselors/{COUNSELOR_ID}/meeting-requests/stats")
    assert response.status_code == HTTPStatus.OK
    return response.json()


def test_booking_claims_slot_and_second_booking_conflicts(client):
    """
    Publish, see it open, book it, and watch a second booking of the same
    slot fail with 409 SlotUnavailable.
    """
    slot = _publish(client)
    listed = client.get(f"/counselors/{COUNSELOR_ID}/slots").json()
    assert [s["id"] for s in listed] == [slot["id"]]

    data = _create(client, slot["id"])
    assert data["status"] == "pending"
    assert data["agenda"] == "discuss apps"
    assert data["requesterId"] == STUDENT_ID
    assert data["ownerId"] == COUNSELOR_ID
    assert data["availabilitySlotId"] == slot["id"]
    assert data["requestedDate"] == future_day().isoformat()
    assert data["requestedTime"] == "09:00:00"

    assert client.get(f"/counselors/{COUNSELOR_ID}/slots").json() == []

    second = client.post("/meeting-requests", json=_request_payload(slot["id"], requester_id="student-2"))
    assert second.status_code == HTTPStatus.CONFLICT
    assert second.json()["kind"] == "SlotUnavailable"


def test_empty_agenda_is_400_and_slot_stays_open(client):
    slot = _publish(client)

    response = client.post("/meeting-requests", json=_request_payload(slot["id"], agenda="   "))

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.json() == {"kind": "EmptyAgenda", "detail": "Agenda must not be empty."}

    listed = client.get(f"/counselors/{COUNSELOR_ID}/slots").json()
    assert [(s["id"], s["claimed"]) for s in listed] == [(slot["id"], False)]


def test_overlong_agenda_is_422(client):
    slot = _publish(client)

    response = client.post("/meeting-requests", json=_request_payload(slot["id"], agenda="x" * 2001))

    assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY


def test_booking_unknown_slot_is_404(client):
    response = client.post("/meeting-requests", json=_request_payload("no-such-slot"))

    assert response.status_code == HTTPStatus.NOT_FOUND
    assert response.json()["kind"] == "SlotNotFound"


def test_accept_with_reference_then_reject_is_409(client):
    slot = _publish(client)
    request_id = _create(client, slot["id"])["id"]

    accepted = client.post(
        f"/meeting-requests/{request_id}/accept",
        json={"meetingReference": "https://call.example/x"},
    )
    assert accepted.status_code == HTTPStatus.OK
    assert accepted.json()["status"] == "accepted"
    assert accepted.json()["meetingReference"] == "https://call.example/x"

    rejected = client.post(f"/meeting-requests/{request_id}/reject", json={"reason": "too late"})
    assert rejected.status_code == HTTPStatus.CONFLICT
    assert rejected.json()["kind"] == "NotPending"

    fetched = client.get(f"/meeting-requests/{request_id}").json()
    assert fetched["status"] == "accepted"
    assert fetched["rejectionReason"] is None


def test_accept_without_reference_issues_meeting_link(client):
    """
    When the counselor does not supply a reference, a join link derived
    from the request id is stored.
    """
    slot = _publish(client)
    request_id = _create(client, slot["id"])["id"]

    response = client.post(f"/meeting-requests/{request_id}/accept")

    assert response.status_code == HTTPStatus.OK
    assert response.json()["meetingReference"] == f"https://meet.jit.si/counselbook-meeting-{request_id}"


def test_accept_with_blank_reference_is_400(client):
    slot = _publish(client)
    request_id = _create(client, slot["id"])["id"]

    response = client.post(
        f"/meeting-requests/{request_id}/accept",
        json={"meetingReference": "  "},
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.json()["kind"] == "EmptyReference"


def test_reject_records_reason_and_updates_stats(client):
    slot = _publish(client)
    request_id = _create(client, slot["id"])["id"]
    before = _stats(client)
    assert before == {"total": 1, "pending": 1, "accepted": 0, "rejected": 0}

    response = client.post(f"/meeting-requests/{request_id}/reject", json={"reason": "conflict"})

    assert response.status_code == HTTPStatus.OK
    assert response.json()["status"] == "rejected"
    assert response.json()["rejectionReason"] == "conflict"

    after = _stats(client)
    assert after["rejected"] == before["rejected"] + 1
    assert after["pending"] == 0
    assert after["total"] == 1


def test_reject_with_blank_reason_is_400(client):
    slot = _publish(client)
    request_id = _create(client, slot["id"])["id"]

    response = client.post(f"/meeting-requests/{request_id}/reject", json={"reason": ""})

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.json()["kind"] == "EmptyReason"


def test_transition_on_unknown_request_is_404(client):
    accept = client.post("/meeting-requests/missing/accept", json={"meetingReference": "x"})
    reject = client.post("/meeting-requests/missing/reject", json={"reason": "x"})
    fetch = client.get("/meeting-requests/missing")

    for response in (accept, reject, fetch):
        assert response.status_code == HTTPStatus.NOT_FOUND
        assert response.json()["kind"] == "RequestNotFound"


def test_counselor_and_requester_views(client, people):
    first = _create(client, _publish(client, time(9, 0), time(9, 30))["id"], agenda="first")
    second = _create(client, _publish(client, time(10, 0), time(10, 30))["id"], agenda="second")

    queue = client.get(f"/counselors/{COUNSELOR_ID}/meeting-requests")
    assert queue.status_code == HTTPStatus.OK
    queue_data = queue.json()
    assert [item["id"] for item in queue_data] == [second["id"], first["id"]]
    assert queue_data[0]["requester"] == {
        "id": STUDENT_ID,
        "name": "Sam Student",
        "email": "sam@school.example",
        "found": True,
    }
    assert queue_data[0]["slotStartTime"] == "10:00:00"
    assert queue_data[0]["slotEndTime"] == "10:30:00"

    mine = client.get(f"/requesters/{STUDENT_ID}/meeting-requests").json()
    assert [item["id"] for item in mine] == [second["id"], first["id"]]
    assert mine[0]["counselor"]["name"] == "Dana Counselor"

    assert _stats(client)["total"] == len(queue_data)
