"""
Unit test configuration for the booking service.

Use cases get a Unit of Work whose repositories are AsyncMocks, so each test
states exactly what the store answers and asserts what was written.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Callable, Optional
from unittest.mock import AsyncMock
import uuid

import pytest

from eventbook.platform.database.unit_of_work import AbstractUnitOfWork
from eventbook.service.booking.domain.entity.booking_entity import Booking, BookingStatus
from eventbook.service.booking.domain.entity.event_entity import Event


FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


class FakeUnitOfWork(AbstractUnitOfWork):
    def __init__(self) -> None:
        self.booking_command_repo = AsyncMock()
        self.booking_query_repo = AsyncMock()
        self.event_catalog_repo = AsyncMock()
        self.committed = 0
        self.rolled_back = 0

    async def _commit(self) -> None:
        self.committed += 1

    async def rollback(self) -> None:
        self.rolled_back += 1


@pytest.fixture
def uow() -> FakeUnitOfWork:
    fake = FakeUnitOfWork()
    fake.booking_query_repo.get_by_idempotency_key.return_value = None
    fake.booking_query_repo.has_confirmed_booking.return_value = False
    fake.event_catalog_repo.reserve_seats.return_value = True
    fake.event_catalog_repo.release_seats.return_value = True
    fake.booking_command_repo.mark_cancelled.return_value = True
    return fake


@pytest.fixture
def uow_factory(uow: FakeUnitOfWork) -> Callable[[], FakeUnitOfWork]:
    return lambda: uow


@pytest.fixture
def make_event() -> Callable[..., Event]:
    def _make(
        *,
        event_id: int = 1,
        total_seats: int = 10,
        available_seats: Optional[int] = None,
        price: str = '500.00',
        date: Optional[datetime] = None,
    ) -> Event:
        return Event(
            id=event_id,
            title='Rust Meetup',
            total_seats=total_seats,
            available_seats=total_seats if available_seats is None else available_seats,
            price=Decimal(price),
            date=date or FIXED_NOW + timedelta(days=7),
            location='Hall B',
            created_at=FIXED_NOW,
            updated_at=FIXED_NOW,
        )

    return _make


@pytest.fixture
def make_booking() -> Callable[..., Booking]:
    def _make(**overrides: Any) -> Booking:
        fields: dict[str, Any] = {
            'id': uuid.uuid4(),
            'user_id': 2,
            'event_id': 1,
            'tickets': 3,
            'total_price': Decimal('1500.00'),
            'booking_code': 'K7Q2ZP0M',
            'status': BookingStatus.CONFIRMED,
            'created_at': FIXED_NOW - timedelta(days=1),
            'updated_at': FIXED_NOW - timedelta(days=1),
        }
        fields.update(overrides)
        return Booking(**fields)

    return _make
