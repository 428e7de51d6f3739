# counselbook/api/routes/meeting_requests.py
from http import HTTPStatus

from fastapi import APIRouter, Depends, Path

from counselbook.api.dependencies.services import get_meeting_engine
from counselbook.schemas.meeting_request import (
    AcceptPayload,
    CounselorRequestView,
    MeetingRequestCreate,
    MeetingRequestRead,
    MeetingRequestStats,
    RejectPayload,
    RequesterRequestView,
)
from counselbook.services.meeting_engine import MeetingRequestEngine
from counselbook.services.meeting_links import MeetingLinkIssuer, get_meeting_link_issuer

router = APIRouter(tags=["Meeting requests"])


@router.post(
    "/meeting-requests",
    response_model=MeetingRequestRead,
    status_code=HTTPStatus.CREATED,
    summary="Request a meeting in one of a counselor's open slots",
    description=(
        "Atomically claims the slot and creates a `pending` request.\n\n"
        "Exactly one concurrent request can win a given slot; the others receive "
        "`409 SlotUnavailable` and should pick another slot."
    ),
    responses={
        400: {"description": "EmptyAgenda."},
        404: {"description": "Slot not found for this counselor."},
        409: {"description": "SlotUnavailable."},
    },
)
async def create_meeting_request(
    payload: MeetingRequestCreate,
    engine: MeetingRequestEngine = Depends(get_meeting_engine),
) -> MeetingRequestRead:
    request = await engine.create_request(
        requester_id=payload.requester_id,
        counselor_id=payload.counselor_id,
        slot_id=payload.slot_id,
        agenda=payload.agenda,
    )
    return MeetingRequestRead.model_validate(request)


@router.get(
    "/meeting-requests/{request_id}",
    response_model=MeetingRequestRead,
    summary="Get a single meeting request",
)
async def get_meeting_request(
    request_id: str = Path(...),
    engine: MeetingRequestEngine = Depends(get_meeting_engine),
) -> MeetingRequestRead:
    return MeetingRequestRead.model_validate(await engine.get_request(request_id))


@router.post(
    "/meeting-requests/{request_id}/accept",
    response_model=MeetingRequestRead,
    summary="Accept a pending meeting request",
    description=(
        "Moves the request from `pending` to `accepted` and stores the meeting "
        "reference. If the body omits `meetingReference`, a join link is issued "
        "from `MEETING_LINK_BASE_URL`."
    ),
    responses={
        400: {"description": "EmptyReference."},
        404: {"description": "Meeting request not found."},
        409: {"description": "NotPending: the request already reached a terminal state."},
    },
)
async def accept_meeting_request(
    request_id: str = Path(...),
    payload: AcceptPayload | None = None,
    engine: MeetingRequestEngine = Depends(get_meeting_engine),
    links: MeetingLinkIssuer = Depends(get_meeting_link_issuer),
) -> MeetingRequestRead:
    reference = payload.meeting_reference if payload else None
    if reference is None:
        reference = links.issue(request_id)

    request = await engine.accept(request_id, reference)
    return MeetingRequestRead.model_validate(request)


@router.post(
    "/meeting-requests/{request_id}/reject",
    response_model=MeetingRequestRead,
    summary="Reject a pending meeting request",
    description=(
        "Moves the request from `pending` to `rejected` with a reason. "
        "The slot is **not** reopened."
    ),
    responses={
        400: {"description": "EmptyReason."},
        404: {"description": "Meeting request not found."},
        409: {"description": "NotPending: the request already reached a terminal state."},
    },
)
async def reject_meeting_request(
    payload: RejectPayload,
    request_id: str = Path(...),
    engine: MeetingRequestEngine = Depends(get_meeting_engine),
) -> MeetingRequestRead:
    request = await engine.reject(request_id, payload.reason)
    return MeetingRequestRead.model_validate(request)


@router.get(
    "/counselors/{counselor_id}/meeting-requests",
    response_model=list[CounselorRequestView],
    summary="Counselor's inbound meeting requests",
    description="Newest first, each joined with the requesting student's name and email.",
)
async def list_counselor_requests(
    counselor_id: str = Path(...),
    engine: MeetingRequestEngine = Depends(get_meeting_engine),
) -> list[CounselorRequestView]:
    return await engine.list_for_counselor(counselor_id)


@router.get(
    "/counselors/{counselor_id}/meeting-requests/stats",
    response_model=MeetingRequestStats,
    summary="Status counts over a counselor's meeting requests",
)
async def get_counselor_stats(
    counselor_id: str = Path(...),
    engine: MeetingRequestEngine = Depends(get_meeting_engine),
) -> MeetingRequestStats:
    return await engine.stats(counselor_id)


@router.get(
    "/requesters/{requester_id}/meeting-requests",
    response_model=list[RequesterRequestView],
    summary="A student's own meeting requests",
    description="Newest first, each joined with the counselor's name and email.",
)
async def list_requester_requests(
    requester_id: str = Path(...),
    engine: MeetingRequestEngine = Depends(get_meeting_engine),
) -> list[RequesterRequestView]:
    return await engine.list_for_requester(requester_id)
