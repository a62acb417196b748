"""Failures of booking and cancellation, each with a short message safe to show end users."""

from eventbook.platform.exception.exceptions import (
    ConflictError,
    CustomBaseError,
    DomainError,
    ForbiddenError,
)


class InsufficientSeatsError(ConflictError):
    code = 'insufficient_seats'
    default_message = 'Not enough seats available'


class DuplicateBookingError(ConflictError):
    code = 'duplicate_booking'
    default_message = 'You already have a booking for this event'


class CodeGenerationExhaustedError(CustomBaseError):
    code = 'code_generation_exhausted'
    status_code = 503
    default_message = 'Could not issue a booking code, please retry'


class UnauthorizedError(ForbiddenError):
    code = 'unauthorized'
    default_message = 'You are not allowed to perform this action'


class CancellationWindowClosedError(DomainError):
    code = 'cancellation_window_closed'

    def __init__(self, window_hours: int = 24) -> None:
        super().__init__(f'Bookings cannot be cancelled within {window_hours} hours of the event')


class BookingCodeCollision(Exception):
    """Insert hit the booking_code unique constraint. Retried internally, never surfaced."""
