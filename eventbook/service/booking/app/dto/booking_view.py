from datetime import datetime
from decimal import Decimal

import attrs

from eventbook.service.booking.domain.entity.booking_entity import Booking
from eventbook.service.booking.domain.entity.event_entity import Event


@attrs.frozen
class EventSummary:
    id: int
    title: str
    date: datetime
    location: str | None
    price: Decimal

    @classmethod
    def from_event(cls, event: Event) -> 'EventSummary':
        assert event.id is not None
        return cls(
            id=event.id,
            title=event.title,
            date=event.date,
            location=event.location,
            price=event.price,
        )


@attrs.frozen
class BookingWithEvent:
    booking: Booking
    event: EventSummary | None


@attrs.frozen
class BookingStats:
    total_bookings: int
    confirmed_bookings: int
    cancelled_bookings: int
    total_revenue: Decimal
