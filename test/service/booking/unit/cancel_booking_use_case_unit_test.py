from datetime import datetime, timedelta
from typing import Callable
import uuid

import pytest

from eventbook.platform.exception.exceptions import (
    DomainError,
    InvariantViolationError,
    NotFoundError,
)
from eventbook.service.booking.app.command.cancel_booking_use_case import CancelBookingUseCase
from eventbook.service.booking.domain.booking_errors import (
    CancellationWindowClosedError,
    UnauthorizedError,
)
from eventbook.service.booking.domain.entity.booking_entity import Booking, BookingStatus
from eventbook.service.booking.domain.entity.event_entity import Event
from eventbook.service.booking.domain.entity.user_entity import UserRole


@pytest.fixture
def cancel_booking_use_case(uow_factory: Callable, fixed_now: datetime) -> CancelBookingUseCase:
    return CancelBookingUseCase(
        uow_factory=uow_factory, cancellation_window=timedelta(hours=24), clock=lambda: fixed_now
    )


@pytest.fixture
def confirmed_booking(
    uow, make_booking: Callable[..., Booking], make_event: Callable[..., Event], fixed_now: datetime
) -> Booking:
    booking = make_booking(user_id=2, event_id=1, tickets=3)
    uow.booking_query_repo.get_by_id.return_value = booking
    uow.event_catalog_repo.get_event.return_value = make_event(
        available_seats=7, date=fixed_now + timedelta(hours=48)
    )
    return booking


@pytest.mark.unit
class TestCancelBookingUseCase:
    @pytest.mark.asyncio
    async def test_owner_cancels__status_flipped_and_seats_released(
        self,
        cancel_booking_use_case: CancelBookingUseCase,
        uow,
        confirmed_booking: Booking,
        fixed_now: datetime,
    ) -> None:
        """
        Given: a confirmed booking of 3 tickets for an event 48h away
        When: its owner cancels
        Then: the booking is cancelled, 3 seats go back, the UoW commits once
        """
        cancelled = await cancel_booking_use_case.cancel_booking(
            requester_id=2, requester_role=UserRole.USER, booking_id=confirmed_booking.id
        )

        assert cancelled.status == BookingStatus.CANCELLED
        assert cancelled.cancelled_at == fixed_now
        uow.booking_command_repo.mark_cancelled.assert_awaited_once_with(booking=cancelled)
        uow.event_catalog_repo.release_seats.assert_awaited_once_with(event_id=1, tickets=3)
        assert uow.committed == 1

    @pytest.mark.asyncio
    async def test_admin_cancels_someone_elses_booking(
        self, cancel_booking_use_case: CancelBookingUseCase, uow, confirmed_booking: Booking
    ) -> None:
        cancelled = await cancel_booking_use_case.cancel_booking(
            requester_id=1, requester_role=UserRole.ADMIN, booking_id=confirmed_booking.id
        )

        assert cancelled.status == BookingStatus.CANCELLED
        assert uow.committed == 1

    @pytest.mark.asyncio
    async def test_cancel_fail__not_owner(
        self, cancel_booking_use_case: CancelBookingUseCase, uow, confirmed_booking: Booking
    ) -> None:
        with pytest.raises(UnauthorizedError, match='owner or an admin'):
            await cancel_booking_use_case.cancel_booking(
                requester_id=3, requester_role=UserRole.USER, booking_id=confirmed_booking.id
            )

        uow.booking_command_repo.mark_cancelled.assert_not_awaited()
        uow.event_catalog_repo.release_seats.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cancel_fail__booking_not_found(
        self, cancel_booking_use_case: CancelBookingUseCase, uow
    ) -> None:
        uow.booking_query_repo.get_by_id.return_value = None

        with pytest.raises(NotFoundError, match='Booking not found'):
            await cancel_booking_use_case.cancel_booking(
                requester_id=2, requester_role=UserRole.USER, booking_id=uuid.uuid4()
            )

    @pytest.mark.asyncio
    async def test_cancel_fail__already_cancelled(
        self,
        cancel_booking_use_case: CancelBookingUseCase,
        uow,
        make_booking: Callable[..., Booking],
    ) -> None:
        uow.booking_query_repo.get_by_id.return_value = make_booking(
            status=BookingStatus.CANCELLED
        )

        with pytest.raises(DomainError, match='already cancelled'):
            await cancel_booking_use_case.cancel_booking(
                requester_id=2, requester_role=UserRole.USER, booking_id=uuid.uuid4()
            )

        uow.event_catalog_repo.release_seats.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cancel_fail__lost_race_to_concurrent_cancel(
        self, cancel_booking_use_case: CancelBookingUseCase, uow, confirmed_booking: Booking
    ) -> None:
        """The conditional status flip matched no row: another cancel committed first."""
        uow.booking_command_repo.mark_cancelled.return_value = False

        with pytest.raises(DomainError, match='already cancelled'):
            await cancel_booking_use_case.cancel_booking(
                requester_id=2, requester_role=UserRole.USER, booking_id=confirmed_booking.id
            )

        uow.event_catalog_repo.release_seats.assert_not_awaited()
        assert uow.committed == 0

    @pytest.mark.parametrize('role', [UserRole.USER, UserRole.ADMIN])
    @pytest.mark.asyncio
    async def test_cancel_fail__inside_cancellation_window(
        self,
        cancel_booking_use_case: CancelBookingUseCase,
        uow,
        confirmed_booking: Booking,
        make_event: Callable[..., Event],
        fixed_now: datetime,
        role: UserRole,
    ) -> None:
        uow.event_catalog_repo.get_event.return_value = make_event(
            date=fixed_now + timedelta(hours=23, minutes=59)
        )

        with pytest.raises(CancellationWindowClosedError, match='within 24 hours'):
            await cancel_booking_use_case.cancel_booking(
                requester_id=2, requester_role=role, booking_id=confirmed_booking.id
            )

        uow.booking_command_repo.mark_cancelled.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cancel_exactly_at_window_boundary_succeeds(
        self,
        cancel_booking_use_case: CancelBookingUseCase,
        uow,
        confirmed_booking: Booking,
        make_event: Callable[..., Event],
        fixed_now: datetime,
    ) -> None:
        uow.event_catalog_repo.get_event.return_value = make_event(
            available_seats=7, date=fixed_now + timedelta(hours=24)
        )

        cancelled = await cancel_booking_use_case.cancel_booking(
            requester_id=2, requester_role=UserRole.USER, booking_id=confirmed_booking.id
        )

        assert cancelled.status == BookingStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_cancel_uses_explicit_now_over_clock(
        self,
        cancel_booking_use_case: CancelBookingUseCase,
        confirmed_booking: Booking,
        fixed_now: datetime,
    ) -> None:
        """Event is 48h after the clock, but only 1h after the supplied `now`."""
        with pytest.raises(CancellationWindowClosedError):
            await cancel_booking_use_case.cancel_booking(
                requester_id=2,
                requester_role=UserRole.USER,
                booking_id=confirmed_booking.id,
                now=fixed_now + timedelta(hours=47),
            )

    @pytest.mark.asyncio
    async def test_cancel_fail__release_would_exceed_total_seats(
        self, cancel_booking_use_case: CancelBookingUseCase, uow, confirmed_booking: Booking
    ) -> None:
        """
        Given: the conditional seat increment matches no row
        When: the booking is cancelled
        Then: InvariantViolationError and nothing is committed
        """
        uow.event_catalog_repo.release_seats.return_value = False

        with pytest.raises(InvariantViolationError):
            await cancel_booking_use_case.cancel_booking(
                requester_id=2, requester_role=UserRole.USER, booking_id=confirmed_booking.id
            )

        assert uow.committed == 0
        assert uow.rolled_back == 1
