# counselbook/api/routes/internal.py
from http import HTTPStatus

from fastapi import APIRouter, Depends, Path

from counselbook.api.dependencies.internal_auth import verify_internal_api_key
from counselbook.api.dependencies.services import get_availability_store
from counselbook.schemas.availability import SlotRead
from counselbook.services.availability_store import AvailabilityStore

router = APIRouter(
    prefix="/internal",
    tags=["Internal"],
    dependencies=[Depends(verify_internal_api_key)],
)


@router.post(
    "/slots/{slot_id}/release",
    response_model=SlotRead,
    status_code=HTTPStatus.OK,
    summary="Reopen a claimed slot",
    description=(
        "Administrative path for returning a slot to the open pool, e.g. after its "
        "request was rejected.\n\n"
        "Refused with `409 SlotInUse` while a pending or accepted request still "
        "references the slot. Releasing an already open slot is a no-op.\n\n"
        "Protected via the `X-Internal-Api-Key` header when configured."
    ),
    responses={
        401: {"description": "Missing or invalid internal API key (if configured)."},
        404: {"description": "Slot not found."},
        409: {"description": "SlotInUse."},
    },
)
async def release_slot(
    slot_id: str = Path(...),
    store: AvailabilityStore = Depends(get_availability_store),
) -> SlotRead:
    slot = await store.release_slot(slot_id)
    return SlotRead.model_validate(slot)
