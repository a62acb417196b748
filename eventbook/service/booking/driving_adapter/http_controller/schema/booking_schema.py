from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from eventbook.service.booking.app.dto.booking_view import (
    BookingStats,
    BookingWithEvent,
    EventSummary,
)
from eventbook.service.booking.domain.entity.booking_entity import Booking


class BookingCreateRequest(BaseModel):
    model_config = {
        'json_schema_extra': {
            'examples': [
                {'event_id': 1, 'tickets': 2},
                {
                    'event_id': 1,
                    'tickets': 3,
                    'idempotency_key': '5d0f0c8e-checkout-42',
                    'payment_reference': 'pay_Nc8xYz12',
                },
            ]
        },
    }

    event_id: int
    tickets: int = Field(ge=1)
    idempotency_key: Optional[str] = Field(default=None, min_length=1, max_length=128)
    payment_reference: Optional[str] = Field(default=None, max_length=255)


class BookingResponse(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'id': '01936d8f-5e73-7c4e-a9c5-123456789abc',  # UUID7
                'user_id': 2,
                'event_id': 1,
                'tickets': 3,
                'total_price': '1500.00',
                'booking_code': 'K7Q2ZP0M',
                'status': 'confirmed',
                'created_at': '2025-01-10T10:30:00Z',
                'cancelled_at': None,
            }
        },
    }

    id: UUID
    user_id: int
    event_id: int
    tickets: int
    total_price: Decimal
    booking_code: str
    status: str
    created_at: datetime
    cancelled_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, booking: Booking) -> 'BookingResponse':
        assert booking.created_at is not None
        return cls(
            id=booking.id,
            user_id=booking.user_id,
            event_id=booking.event_id,
            tickets=booking.tickets,
            total_price=booking.total_price,
            booking_code=booking.booking_code,
            status=booking.status.value,
            created_at=booking.created_at,
            cancelled_at=booking.cancelled_at,
        )


class EventSummaryResponse(BaseModel):
    id: int
    title: str
    date: datetime
    location: Optional[str] = None
    price: Decimal

    @classmethod
    def from_summary(cls, summary: EventSummary) -> 'EventSummaryResponse':
        return cls(
            id=summary.id,
            title=summary.title,
            date=summary.date,
            location=summary.location,
            price=summary.price,
        )


class BookingWithEventResponse(BookingResponse):
    event: Optional[EventSummaryResponse] = None

    @classmethod
    def from_view(cls, view: BookingWithEvent) -> 'BookingWithEventResponse':
        return cls(
            **BookingResponse.from_entity(view.booking).model_dump(),
            event=EventSummaryResponse.from_summary(view.event) if view.event else None,
        )


class CancelBookingResponse(BaseModel):
    status: str
    released_tickets: int


class ActiveBookingResponse(BaseModel):
    event_id: int
    has_active_booking: bool


class BookingStatsResponse(BaseModel):
    total_bookings: int
    confirmed_bookings: int
    cancelled_bookings: int
    total_revenue: Decimal

    @classmethod
    def from_stats(cls, stats: BookingStats) -> 'BookingStatsResponse':
        return cls(
            total_bookings=stats.total_bookings,
            confirmed_bookings=stats.confirmed_bookings,
            cancelled_bookings=stats.cancelled_bookings,
            total_revenue=stats.total_revenue,
        )
