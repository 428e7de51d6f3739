# counselbook/core/errors.py
from __future__ import annotations


class SchedulingError(Exception):
    """
    Base class for every failure the booking core reports to its callers.

    Each error carries a stable machine-readable `kind` (the class name by
    default) and a human-readable `message`. Store/driver exceptions are
    never wrapped in this hierarchy; they propagate unchanged.
    """

    default_message = "Scheduling operation failed."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind, "detail": self.message}


# --------------------------------------------------------------------------
# Validation errors: caller input problems, never retried
# --------------------------------------------------------------------------

class ValidationFailure(SchedulingError):
    default_message = "Invalid input."


class EmptyAgenda(ValidationFailure):
    default_message = "Agenda must not be empty."


class InvalidRange(ValidationFailure):
    default_message = "Slot start time must be earlier than its end time."


class InThePast(ValidationFailure):
    default_message = "Slots cannot be published in the past."


class EmptyReference(ValidationFailure):
    default_message = "Meeting reference must not be empty."


class EmptyReason(ValidationFailure):
    default_message = "Rejection reason must not be empty."


# --------------------------------------------------------------------------
# Conflict errors: the precondition no longer holds; caller re-queries
# --------------------------------------------------------------------------

class ConflictError(SchedulingError):
    default_message = "Conflicting state."


class AlreadyClaimed(ConflictError):
    default_message = "Slot has already been claimed."


class SlotUnavailable(ConflictError):
    default_message = "Slot is no longer available."


class SlotOverlap(ConflictError):
    default_message = "Slot overlaps another slot of the same counselor."


class SlotInUse(ConflictError):
    default_message = "Slot is referenced by a live meeting request."


class InvalidTransition(ConflictError):
    default_message = "Transition is not allowed from the current status."


class NotPending(InvalidTransition):
    default_message = "Meeting request is not pending."


# --------------------------------------------------------------------------
# Not-found errors
# --------------------------------------------------------------------------

class NotFoundError(SchedulingError):
    default_message = "Resource not found."


class SlotNotFound(NotFoundError):
    default_message = "Availability slot not found."


class RequestNotFound(NotFoundError):
    default_message = "Meeting request not found."
