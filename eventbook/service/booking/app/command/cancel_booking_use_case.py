from datetime import datetime, timedelta
from typing import Callable, Optional
from uuid import UUID

from opentelemetry import trace

from eventbook.platform.database.unit_of_work import AbstractUnitOfWork
from eventbook.platform.exception.exceptions import (
    DomainError,
    InvariantViolationError,
    NotFoundError,
)
from eventbook.platform.logging.loguru_io import Logger
from eventbook.platform.metrics.booking_metrics import metrics
from eventbook.platform.types.utc_datetime import as_utc, utc_now
from eventbook.service.booking.domain.booking_errors import (
    CancellationWindowClosedError,
    UnauthorizedError,
)
from eventbook.service.booking.domain.entity.booking_entity import Booking
from eventbook.service.booking.domain.entity.user_entity import UserRole


class CancelBookingUseCase:
    """
    Cancel a confirmed booking and return its seats to the event.

    Allowed for the booking owner or an admin, and only while the event starts at
    least `cancellation_window` from now. The status flip and the seat increment
    commit together; a seat increment that would push available seats above the
    total aborts with InvariantViolationError instead of clamping.
    """

    def __init__(
        self,
        *,
        uow_factory: Callable[[], AbstractUnitOfWork],
        cancellation_window: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.uow_factory = uow_factory
        self.cancellation_window = cancellation_window
        self.clock = clock
        self.tracer = trace.get_tracer(__name__)

    @Logger.io
    async def cancel_booking(
        self,
        *,
        requester_id: int,
        requester_role: UserRole | str,
        booking_id: UUID,
        now: Optional[datetime] = None,
    ) -> Booking:
        now = as_utc(now) if now else self.clock()

        with self.tracer.start_as_current_span(
            'use_case.cancel_booking',
            attributes={'booking.id': str(booking_id), 'user.id': requester_id},
        ):
            async with self.uow_factory() as uow:
                booking = await uow.booking_query_repo.get_by_id(booking_id=booking_id)
                if not booking:
                    raise NotFoundError('Booking not found')

                if not booking.is_owned_by(requester_id) and requester_role != UserRole.ADMIN:
                    raise UnauthorizedError('Only the booking owner or an admin can cancel it')

                cancelled = booking.cancel(now=now)

                event = await uow.event_catalog_repo.get_event(event_id=booking.event_id)
                if not event:
                    raise NotFoundError('Event not found')

                if event.date - now < self.cancellation_window:
                    raise CancellationWindowClosedError(
                        int(self.cancellation_window.total_seconds() // 3600)
                    )

                # Conditional flip: a concurrent cancel that committed first leaves no row to match
                if not await uow.booking_command_repo.mark_cancelled(booking=cancelled):
                    raise DomainError('Booking is already cancelled')

                if not await uow.event_catalog_repo.release_seats(
                    event_id=booking.event_id, tickets=booking.tickets
                ):
                    Logger.base.critical(
                        f'🚨 [CANCEL-BOOKING] Releasing {booking.tickets} seats of booking '
                        f'{booking.id} would exceed total seats of event {booking.event_id} '
                        f'(available={event.available_seats}, total={event.total_seats})'
                    )
                    raise InvariantViolationError()

                await uow.commit()

        metrics.tickets_released.inc(booking.tickets)
        Logger.base.info(
            f'↩️  [CANCEL-BOOKING] {booking.booking_code} cancelled, '
            f'{booking.tickets} seats back to event {booking.event_id}'
        )
        return cancelled
