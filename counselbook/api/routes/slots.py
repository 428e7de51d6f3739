# counselbook/api/routes/slots.py
from datetime import date as date_type
from http import HTTPStatus

from fastapi import APIRouter, Depends, Path, Query

from counselbook.api.dependencies.services import get_availability_store
from counselbook.schemas.availability import SlotCreate, SlotRead
from counselbook.services.availability_store import AvailabilityStore

router = APIRouter(tags=["Availability"])


@router.get(
    "/counselors/{counselor_id}/slots",
    response_model=list[SlotRead],
    summary="List a counselor's availability slots",
    description=(
        "Return the counselor's slots on or after `from_date`, ordered by date and "
        "start time.\n\n"
        "- By default only **open** (unclaimed) slots are returned; this is the view "
        "students book from.\n"
        "- With `include_claimed=true` claimed slots are included as well, which is "
        "the counselor's management view."
    ),
)
async def list_slots(
    counselor_id: str = Path(..., description="Counselor whose slots should be listed."),
    from_date: date_type | None = Query(
        default=None,
        description="Earliest slot date (inclusive). Defaults to today's date.",
        examples=["2026-12-28"],
    ),
    include_claimed: bool = Query(
        default=False,
        description="Also return slots that are already claimed by a request.",
    ),
    store: AvailabilityStore = Depends(get_availability_store),
) -> list[SlotRead]:
    if from_date is None:
        from_date = date_type.today()

    if include_claimed:
        slots = await store.list_slots(counselor_id, from_date=from_date, include_claimed=True)
    else:
        slots = await store.list_open_slots(counselor_id, from_date=from_date)

    return [SlotRead.model_validate(slot) for slot in slots]


@router.post(
    "/counselors/{counselor_id}/slots",
    response_model=SlotRead,
    status_code=HTTPStatus.CREATED,
    summary="Publish a new availability slot",
    responses={
        400: {"description": "InvalidRange or InThePast."},
        409: {"description": "SlotOverlap: the range intersects another slot of this counselor."},
    },
)
async def publish_slot(
    payload: SlotCreate,
    counselor_id: str = Path(..., description="Counselor publishing the slot."),
    store: AvailabilityStore = Depends(get_availability_store),
) -> SlotRead:
    slot = await store.publish_slot(
        counselor_id,
        payload.date,
        payload.start_time,
        payload.end_time,
    )
    return SlotRead.model_validate(slot)


@router.delete(
    "/slots/{slot_id}",
    status_code=HTTPStatus.NO_CONTENT,
    summary="Remove an unclaimed availability slot",
    responses={
        404: {"description": "Slot not found."},
        409: {"description": "SlotInUse: the slot is claimed by a request."},
    },
)
async def remove_slot(
    slot_id: str = Path(..., description="Slot to remove."),
    store: AvailabilityStore = Depends(get_availability_store),
) -> None:
    await store.remove_slot(slot_id)
