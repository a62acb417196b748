from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from eventbook.service.booking.domain.entity.event_entity import Event


class EventCreateRequest(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'title': 'Rust Meetup',
                'total_seats': 10,
                'price': '500.00',
                'date': '2026-12-01T19:00:00Z',
                'location': 'Hall B',
            }
        },
    }

    title: str = Field(min_length=1, max_length=255)
    total_seats: int = Field(ge=1)
    price: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    date: datetime
    location: Optional[str] = Field(default=None, max_length=255)


class EventUpdateRequest(BaseModel):
    """Fields left out keep their stored value."""

    model_config = {
        'json_schema_extra': {'example': {'total_seats': 12, 'price': '450.00'}},
    }

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    total_seats: Optional[int] = Field(default=None, ge=1)
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    date: Optional[datetime] = None
    location: Optional[str] = Field(default=None, max_length=255)


class EventResponse(BaseModel):
    id: int
    title: str
    total_seats: int
    available_seats: int
    price: Decimal
    date: datetime
    location: Optional[str] = None

    @classmethod
    def from_entity(cls, event: Event) -> 'EventResponse':
        assert event.id is not None
        return cls(
            id=event.id,
            title=event.title,
            total_seats=event.total_seats,
            available_seats=event.available_seats,
            price=event.price,
            date=event.date,
            location=event.location,
        )
