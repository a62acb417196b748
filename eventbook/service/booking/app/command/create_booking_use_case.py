from typing import Callable, Optional

from opentelemetry import trace
from uuid_utils.compat import uuid7

from eventbook.platform.database.unit_of_work import AbstractUnitOfWork
from eventbook.platform.exception.exceptions import DomainError, NotFoundError
from eventbook.platform.logging.loguru_io import Logger
from eventbook.platform.metrics.booking_metrics import metrics
from eventbook.service.booking.domain.booking_errors import (
    BookingCodeCollision,
    CodeGenerationExhaustedError,
    DuplicateBookingError,
    InsufficientSeatsError,
)
from eventbook.service.booking.domain.entity.booking_entity import Booking
from eventbook.service.booking.domain.value_object.booking_code import BookingCodeGenerator


class CreateBookingUseCase:
    """
    Reserve seats and record a confirmed booking in one transaction.

    Flow (per attempt, all inside one Unit of Work):
    1. Idempotency replay: same user + same key + same request returns the
       stored booking while it is still confirmed
    2. Load event (NotFoundError)
    3. Reject a second confirmed booking for the same user and event
    4. Conditional seat decrement (InsufficientSeatsError when it matches no row)
    5. Insert booking with a fresh booking code, commit

    A booking_code clash rolls the whole attempt back and starts again with a new
    code, up to `max_code_attempts` times.
    """

    def __init__(
        self,
        *,
        uow_factory: Callable[[], AbstractUnitOfWork],
        code_generator: BookingCodeGenerator,
        max_code_attempts: int = 5,
    ) -> None:
        self.uow_factory = uow_factory
        self.code_generator = code_generator
        self.max_code_attempts = max_code_attempts
        self.tracer = trace.get_tracer(__name__)

    @Logger.io
    async def create_booking(
        self,
        *,
        user_id: int,
        event_id: int,
        tickets: int,
        idempotency_key: Optional[str] = None,
        payment_reference: Optional[str] = None,
    ) -> Booking:
        if tickets < 1:
            raise DomainError('Ticket count must be at least 1')

        with self.tracer.start_as_current_span(
            'use_case.create_booking',
            attributes={'event.id': event_id, 'user.id': user_id, 'booking.tickets': tickets},
        ) as span:
            for attempt in range(1, self.max_code_attempts + 1):
                try:
                    booking = await self._create_once(
                        user_id=user_id,
                        event_id=event_id,
                        tickets=tickets,
                        idempotency_key=idempotency_key,
                        payment_reference=payment_reference,
                    )
                except BookingCodeCollision:
                    metrics.booking_code_collisions.inc()
                    Logger.base.warning(
                        f'🔁 [CREATE-BOOKING] Booking code collision, '
                        f'attempt {attempt}/{self.max_code_attempts}'
                    )
                    continue
                except DuplicateBookingError:
                    # A concurrent request with the same key may have won the insert
                    if idempotency_key and (
                        replay := await self._find_replay(
                            user_id=user_id,
                            event_id=event_id,
                            tickets=tickets,
                            idempotency_key=idempotency_key,
                        )
                    ):
                        return replay
                    raise

                span.set_attribute('booking.id', str(booking.id))
                return booking

            raise CodeGenerationExhaustedError()

    async def _create_once(
        self,
        *,
        user_id: int,
        event_id: int,
        tickets: int,
        idempotency_key: Optional[str],
        payment_reference: Optional[str],
    ) -> Booking:
        async with self.uow_factory() as uow:
            if idempotency_key:
                existing = await uow.booking_query_repo.get_by_idempotency_key(
                    user_id=user_id, idempotency_key=idempotency_key
                )
                if existing:
                    return self._replay(existing, event_id=event_id, tickets=tickets)

            event = await uow.event_catalog_repo.get_event(event_id=event_id)
            if not event:
                raise NotFoundError('Event not found')

            if await uow.booking_query_repo.has_confirmed_booking(
                user_id=user_id, event_id=event_id
            ):
                raise DuplicateBookingError()

            if not await uow.event_catalog_repo.reserve_seats(event_id=event_id, tickets=tickets):
                raise InsufficientSeatsError()

            booking = Booking.create(
                id=uuid7(),
                user_id=user_id,
                event_id=event_id,
                tickets=tickets,
                total_price=event.price_for(tickets),
                booking_code=self.code_generator.generate(),
                idempotency_key=idempotency_key,
                payment_reference=payment_reference,
            )
            await uow.booking_command_repo.create(booking=booking)
            await uow.commit()

        metrics.tickets_booked.inc(tickets)
        Logger.base.info(
            f'🎫 [CREATE-BOOKING] {booking.booking_code} confirmed: '
            f'user={user_id} event={event_id} tickets={tickets}'
        )
        return booking

    async def _find_replay(
        self, *, user_id: int, event_id: int, tickets: int, idempotency_key: str
    ) -> Optional[Booking]:
        async with self.uow_factory() as uow:
            existing = await uow.booking_query_repo.get_by_idempotency_key(
                user_id=user_id, idempotency_key=idempotency_key
            )
        if not existing:
            return None
        return self._replay(existing, event_id=event_id, tickets=tickets)

    @staticmethod
    def _replay(existing: Booking, *, event_id: int, tickets: int) -> Booking:
        """Replay only a retry of the same request whose booking is still confirmed."""
        if not (
            existing.is_confirmed
            and existing.event_id == event_id
            and existing.tickets == tickets
        ):
            raise DuplicateBookingError('This request key was already used')
        Logger.base.info(f'♻️  [CREATE-BOOKING] Replaying {existing.booking_code} for a retry')
        return existing
