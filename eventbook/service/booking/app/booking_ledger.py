"""
Booking Ledger

Single entry point for booking, cancellation and booking queries. Every call
returns a `LedgerResult`; the typed failures raised by the use cases are caught
here and never escape as exceptions.
"""

from datetime import datetime
import time
from typing import Any, Awaitable, Generic, List, Optional, TypeVar
from uuid import UUID

import attrs

from eventbook.platform.exception.exceptions import CustomBaseError, InvariantViolationError
from eventbook.platform.logging.loguru_io import Logger
from eventbook.platform.metrics.booking_metrics import metrics
from eventbook.service.booking.app.command.cancel_booking_use_case import CancelBookingUseCase
from eventbook.service.booking.app.command.create_booking_use_case import CreateBookingUseCase
from eventbook.service.booking.app.dto.booking_view import BookingStats, BookingWithEvent
from eventbook.service.booking.app.query.booking_stats_use_case import BookingStatsUseCase
from eventbook.service.booking.app.query.get_booking_use_case import GetBookingUseCase
from eventbook.service.booking.app.query.list_bookings_use_case import ListBookingsUseCase
from eventbook.service.booking.domain.entity.booking_entity import Booking
from eventbook.service.booking.domain.entity.user_entity import UserRole


T = TypeVar('T')


@attrs.frozen
class LedgerResult(Generic[T]):
    success: bool
    value: Optional[T] = None
    error: Optional[CustomBaseError] = None

    @classmethod
    def ok(cls, value: T) -> 'LedgerResult[T]':
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: CustomBaseError) -> 'LedgerResult[T]':
        return cls(success=False, error=error)

    @property
    def error_code(self) -> Optional[str]:
        return self.error.code if self.error else None

    @property
    def message(self) -> Optional[str]:
        return self.error.message if self.error else None

    def unwrap(self) -> T:
        """Value on success; re-raise the stored error otherwise (HTTP layer maps it)."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


class BookingLedger:
    def __init__(
        self,
        *,
        create_booking_use_case: CreateBookingUseCase,
        cancel_booking_use_case: CancelBookingUseCase,
        list_bookings_use_case: ListBookingsUseCase,
        get_booking_use_case: GetBookingUseCase,
        booking_stats_use_case: BookingStatsUseCase,
    ) -> None:
        self.create_booking_use_case = create_booking_use_case
        self.cancel_booking_use_case = cancel_booking_use_case
        self.list_bookings_use_case = list_bookings_use_case
        self.get_booking_use_case = get_booking_use_case
        self.booking_stats_use_case = booking_stats_use_case

    async def _run(self, operation: str, call: Awaitable[T]) -> LedgerResult[T]:
        started = time.perf_counter()
        try:
            value = await call
        except InvariantViolationError as e:
            metrics.invariant_violations.labels(operation=operation).inc()
            return self._failed(operation, e)
        except CustomBaseError as e:
            return self._failed(operation, e)
        finally:
            metrics.ledger_operation_duration.labels(operation=operation).observe(
                time.perf_counter() - started
            )
        metrics.ledger_operations.labels(operation=operation, result='ok').inc()
        return LedgerResult.ok(value)

    @staticmethod
    def _failed(operation: str, error: CustomBaseError) -> LedgerResult[Any]:
        metrics.ledger_operations.labels(operation=operation, result=error.code).inc()
        Logger.base.info(f'⛔ [LEDGER] {operation} failed: {error.code} ({error.message})')
        return LedgerResult.fail(error)

    async def create_booking(
        self,
        *,
        user_id: int,
        event_id: int,
        tickets: int,
        idempotency_key: Optional[str] = None,
        payment_reference: Optional[str] = None,
    ) -> LedgerResult[Booking]:
        return await self._run(
            'create_booking',
            self.create_booking_use_case.create_booking(
                user_id=user_id,
                event_id=event_id,
                tickets=tickets,
                idempotency_key=idempotency_key,
                payment_reference=payment_reference,
            ),
        )

    async def cancel_booking(
        self,
        *,
        requester_id: int,
        booking_id: UUID,
        requester_role: UserRole | str,
        now: Optional[datetime] = None,
    ) -> LedgerResult[Booking]:
        return await self._run(
            'cancel_booking',
            self.cancel_booking_use_case.cancel_booking(
                requester_id=requester_id,
                requester_role=requester_role,
                booking_id=booking_id,
                now=now,
            ),
        )

    async def list_bookings_for_user(
        self, *, user_id: int
    ) -> LedgerResult[List[BookingWithEvent]]:
        return await self._run(
            'list_bookings_for_user',
            self.list_bookings_use_case.list_user_bookings(user_id=user_id),
        )

    async def list_bookings_for_event(
        self, *, requester_role: UserRole | str, event_id: int
    ) -> LedgerResult[List[Booking]]:
        return await self._run(
            'list_bookings_for_event',
            self.list_bookings_use_case.list_event_bookings(
                requester_role=requester_role, event_id=event_id
            ),
        )

    async def list_all_bookings(
        self, *, requester_role: UserRole | str
    ) -> LedgerResult[List[BookingWithEvent]]:
        return await self._run(
            'list_all_bookings',
            self.list_bookings_use_case.list_all_bookings(requester_role=requester_role),
        )

    async def has_active_booking(self, *, user_id: int, event_id: int) -> LedgerResult[bool]:
        return await self._run(
            'has_active_booking',
            self.get_booking_use_case.has_active_booking(user_id=user_id, event_id=event_id),
        )

    async def get_booking(
        self, *, requester_id: int, requester_role: UserRole | str, booking_id: UUID
    ) -> LedgerResult[BookingWithEvent]:
        return await self._run(
            'get_booking',
            self.get_booking_use_case.get_booking(
                requester_id=requester_id, requester_role=requester_role, booking_id=booking_id
            ),
        )

    async def get_booking_stats(
        self, *, requester_role: UserRole | str
    ) -> LedgerResult[BookingStats]:
        return await self._run(
            'get_booking_stats',
            self.booking_stats_use_case.get_booking_stats(requester_role=requester_role),
        )
