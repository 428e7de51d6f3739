# counselbook/api/errors.py
import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from counselbook.core.errors import (
    ConflictError,
    NotFoundError,
    SchedulingError,
    ValidationFailure,
)

logger = logging.getLogger(__name__)

STORE_UNAVAILABLE_DETAIL = "Store unavailable. Please retry later."


def status_for(error: SchedulingError) -> HTTPStatus:
    """
    Map a scheduling error category to the HTTP status returned to clients.
    """
    if isinstance(error, ValidationFailure):
        return HTTPStatus.BAD_REQUEST
    if isinstance(error, ConflictError):
        return HTTPStatus.CONFLICT
    if isinstance(error, NotFoundError):
        return HTTPStatus.NOT_FOUND
    return HTTPStatus.INTERNAL_SERVER_ERROR


async def scheduling_error_handler(request: Request, exc: SchedulingError) -> JSONResponse:
    return JSONResponse(status_code=status_for(exc), content=exc.to_dict())


async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    # Driver details stay in the logs, never in the response body.
    logger.exception("Store failure while handling %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=HTTPStatus.SERVICE_UNAVAILABLE,
        content={"kind": "StoreUnavailable", "detail": STORE_UNAVAILABLE_DETAIL},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SchedulingError, scheduling_error_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)
