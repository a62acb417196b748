from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import Optional
from uuid import UUID

import attrs

from eventbook.platform.exception.exceptions import DomainError
from eventbook.platform.logging.loguru_io import Logger
from eventbook.platform.types.utc_datetime import utc_now


class BookingStatus(StrEnum):
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'


@attrs.define
class Booking:
    id: UUID
    user_id: int
    event_id: int
    tickets: int
    total_price: Decimal
    booking_code: str
    status: BookingStatus = BookingStatus.CONFIRMED
    idempotency_key: Optional[str] = None
    payment_reference: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        id: UUID,
        user_id: int,
        event_id: int,
        tickets: int,
        total_price: Decimal,
        booking_code: str,
        idempotency_key: Optional[str] = None,
        payment_reference: Optional[str] = None,
    ) -> 'Booking':
        if tickets < 1:
            raise DomainError('Ticket count must be at least 1')

        now = utc_now()
        return cls(
            id=id,
            user_id=user_id,
            event_id=event_id,
            tickets=tickets,
            total_price=total_price,
            booking_code=booking_code,
            status=BookingStatus.CONFIRMED,
            idempotency_key=idempotency_key,
            payment_reference=payment_reference,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_confirmed(self) -> bool:
        return self.status == BookingStatus.CONFIRMED

    def is_owned_by(self, user_id: int) -> bool:
        return self.user_id == user_id

    @Logger.io
    def cancel(self, *, now: Optional[datetime] = None) -> 'Booking':
        """
        Raises:
            DomainError: booking is already cancelled
        """
        if not self.is_confirmed:
            raise DomainError('Booking is already cancelled')

        now = now or utc_now()
        return attrs.evolve(self, status=BookingStatus.CANCELLED, cancelled_at=now, updated_at=now)
