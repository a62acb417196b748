from uuid import UUID

from eventbook.platform.exception.exceptions import NotFoundError
from eventbook.platform.logging.loguru_io import Logger
from eventbook.service.booking.app.dto.booking_view import BookingWithEvent, EventSummary
from eventbook.service.booking.app.interface.i_booking_query_repo import IBookingQueryRepo
from eventbook.service.booking.app.interface.i_event_catalog_repo import IEventCatalogRepo
from eventbook.service.booking.domain.booking_errors import UnauthorizedError
from eventbook.service.booking.domain.entity.user_entity import UserRole


class GetBookingUseCase:
    def __init__(
        self, *, booking_query_repo: IBookingQueryRepo, event_catalog_repo: IEventCatalogRepo
    ) -> None:
        self.booking_query_repo = booking_query_repo
        self.event_catalog_repo = event_catalog_repo

    @Logger.io
    async def get_booking(
        self, *, requester_id: int, requester_role: UserRole | str, booking_id: UUID
    ) -> BookingWithEvent:
        booking = await self.booking_query_repo.get_by_id(booking_id=booking_id)
        if not booking:
            raise NotFoundError('Booking not found')

        if not booking.is_owned_by(requester_id) and requester_role != UserRole.ADMIN:
            raise UnauthorizedError('You can only view your own bookings')

        event = await self.event_catalog_repo.get_event(event_id=booking.event_id)
        return BookingWithEvent(
            booking=booking, event=EventSummary.from_event(event) if event else None
        )

    @Logger.io
    async def has_active_booking(self, *, user_id: int, event_id: int) -> bool:
        return await self.booking_query_repo.has_confirmed_booking(
            user_id=user_id, event_id=event_id
        )
