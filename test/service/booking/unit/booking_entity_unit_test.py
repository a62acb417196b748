from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable
import uuid

import pytest

from eventbook.platform.exception.exceptions import AuthenticationError, DomainError
from eventbook.service.booking.domain.entity.booking_entity import Booking, BookingStatus
from eventbook.service.booking.domain.entity.event_entity import Event
from eventbook.service.booking.domain.entity.user_entity import UserEntity, UserRole


@pytest.mark.unit
class TestBookingEntity:
    def test_create_starts_confirmed_with_timestamps(self) -> None:
        booking = Booking.create(
            id=uuid.uuid4(),
            user_id=2,
            event_id=1,
            tickets=2,
            total_price=Decimal('1000.00'),
            booking_code='K7Q2ZP0M',
        )

        assert booking.status == BookingStatus.CONFIRMED
        assert booking.created_at is not None
        assert booking.created_at == booking.updated_at
        assert booking.cancelled_at is None

    def test_create_rejects_zero_tickets(self) -> None:
        with pytest.raises(DomainError, match='at least 1'):
            Booking.create(
                id=uuid.uuid4(),
                user_id=2,
                event_id=1,
                tickets=0,
                total_price=Decimal('0'),
                booking_code='K7Q2ZP0M',
            )

    def test_cancel_returns_cancelled_copy(
        self, make_booking: Callable[..., Booking], fixed_now: datetime
    ) -> None:
        booking = make_booking()

        cancelled = booking.cancel(now=fixed_now)

        assert booking.status == BookingStatus.CONFIRMED
        assert cancelled.status == BookingStatus.CANCELLED
        assert cancelled.cancelled_at == fixed_now
        assert cancelled.updated_at == fixed_now
        assert cancelled.id == booking.id

    def test_cancel_twice_is_rejected(self, make_booking: Callable[..., Booking]) -> None:
        cancelled = make_booking().cancel()

        with pytest.raises(DomainError, match='already cancelled'):
            cancelled.cancel()
        assert make_booking().is_confirmed
        assert not cancelled.is_confirmed


@pytest.mark.unit
class TestEventEntity:
    def test_create_opens_all_seats(self) -> None:
        event = Event.create(
            title='  Rust Meetup ',
            total_seats=10,
            price='500.00',
            date=datetime(2026, 12, 1, 19, 0),
        )

        assert event.title == 'Rust Meetup'
        assert event.available_seats == 10
        assert event.booked_seats == 0
        assert event.price == Decimal('500.00')
        assert event.date.tzinfo == timezone.utc

    def test_price_for_multiplies_unit_price(self, make_event: Callable[..., Event]) -> None:
        assert make_event(price='499.99').price_for(3) == Decimal('1499.97')

    @pytest.mark.parametrize(
        'title,total_seats,price,message',
        [
            ('', 10, '1.00', 'title is required'),
            ('Gig', 0, '1.00', 'at least 1 seat'),
            ('Gig', 10, '-0.01', 'cannot be negative'),
        ],
    )
    def test_create_rejects_invalid_input(
        self, title: str, total_seats: int, price: str, message: str
    ) -> None:
        with pytest.raises(DomainError, match=message):
            Event.create(
                title=title,
                total_seats=total_seats,
                price=price,
                date=datetime.now(timezone.utc) + timedelta(days=1),
            )

    def test_edit_growing_total_opens_the_new_seats(
        self, make_event: Callable[..., Event]
    ) -> None:
        event = make_event(total_seats=10, available_seats=7)

        edited = event.edit(total_seats=15)

        assert edited.total_seats == 15
        assert edited.available_seats == 12
        assert edited.booked_seats == 3

    def test_edit_shrinking_total_keeps_booked_seats(
        self, make_event: Callable[..., Event]
    ) -> None:
        event = make_event(total_seats=10, available_seats=7)

        edited = event.edit(total_seats=3)

        assert edited.total_seats == 3
        assert edited.available_seats == 0

    def test_edit_below_booked_seats_is_rejected(self, make_event: Callable[..., Event]) -> None:
        event = make_event(total_seats=10, available_seats=7)

        with pytest.raises(DomainError, match='below the 3 seats already booked'):
            event.edit(total_seats=2)

    def test_edit_keeps_fields_that_are_not_given(
        self, make_event: Callable[..., Event]
    ) -> None:
        event = make_event(total_seats=10, available_seats=7)

        edited = event.edit(price='450.00')

        assert edited.price == Decimal('450.00')
        assert edited.title == event.title
        assert edited.date == event.date
        assert (edited.total_seats, edited.available_seats) == (10, 7)


@pytest.mark.unit
class TestUserEntity:
    def test_role_is_a_plain_string_enum(self) -> None:
        assert UserRole('admin') is UserRole.ADMIN
        assert str(UserRole.USER) == 'user'
        assert f'{UserRole.ADMIN}' == 'admin'

    def test_admin_flag_follows_role(self) -> None:
        assert UserEntity(id=1, role=UserRole.ADMIN).is_admin
        assert not UserEntity(id=2).is_admin

    def test_missing_id_is_not_authenticated(self) -> None:
        with pytest.raises(AuthenticationError):
            UserEntity(id=0).validate_exists()
