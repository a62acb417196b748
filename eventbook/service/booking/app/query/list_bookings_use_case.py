from typing import List

from eventbook.platform.exception.exceptions import NotFoundError
from eventbook.platform.logging.loguru_io import Logger
from eventbook.service.booking.app.dto.booking_view import BookingWithEvent, EventSummary
from eventbook.service.booking.app.interface.i_booking_query_repo import IBookingQueryRepo
from eventbook.service.booking.app.interface.i_event_catalog_repo import IEventCatalogRepo
from eventbook.service.booking.domain.booking_errors import UnauthorizedError
from eventbook.service.booking.domain.entity.booking_entity import Booking
from eventbook.service.booking.domain.entity.user_entity import UserRole


class ListBookingsUseCase:
    def __init__(
        self, *, booking_query_repo: IBookingQueryRepo, event_catalog_repo: IEventCatalogRepo
    ) -> None:
        self.booking_query_repo = booking_query_repo
        self.event_catalog_repo = event_catalog_repo

    async def _with_events(self, bookings: List[Booking]) -> List[BookingWithEvent]:
        # Two reads: bookings, then the events they reference
        events = await self.event_catalog_repo.get_events(
            event_ids={booking.event_id for booking in bookings}
        )
        return [
            BookingWithEvent(
                booking=booking,
                event=EventSummary.from_event(events[booking.event_id])
                if booking.event_id in events
                else None,
            )
            for booking in bookings
        ]

    @Logger.io
    async def list_user_bookings(self, *, user_id: int) -> List[BookingWithEvent]:
        bookings = await self.booking_query_repo.list_by_user(user_id=user_id)
        return await self._with_events(bookings)

    @Logger.io
    async def list_event_bookings(
        self, *, requester_role: UserRole | str, event_id: int
    ) -> List[Booking]:
        if requester_role != UserRole.ADMIN:
            raise UnauthorizedError('Only admins can list bookings for an event')
        if not await self.event_catalog_repo.get_event(event_id=event_id):
            raise NotFoundError('Event not found')
        return await self.booking_query_repo.list_by_event(event_id=event_id)

    @Logger.io
    async def list_all_bookings(self, *, requester_role: UserRole | str) -> List[BookingWithEvent]:
        if requester_role != UserRole.ADMIN:
            raise UnauthorizedError('Only admins can list all bookings')
        bookings = await self.booking_query_repo.list_all()
        return await self._with_events(bookings)
