from datetime import datetime
from decimal import Decimal
from typing import Optional

import attrs

from eventbook.platform.exception.exceptions import DomainError
from eventbook.platform.logging.loguru_io import Logger
from eventbook.platform.types.utc_datetime import as_utc, utc_now


@attrs.define
class Event:
    title: str
    total_seats: int
    available_seats: int
    price: Decimal
    date: datetime
    location: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        title: str,
        total_seats: int,
        price: Decimal | int | str,
        date: datetime,
        location: Optional[str] = None,
    ) -> 'Event':
        if not title or not title.strip():
            raise DomainError('Event title is required')
        if total_seats < 1:
            raise DomainError('Event must have at least 1 seat')
        price = Decimal(str(price))
        if price < 0:
            raise DomainError('Price cannot be negative')

        now = utc_now()
        return cls(
            title=title.strip(),
            total_seats=total_seats,
            available_seats=total_seats,
            price=price,
            date=as_utc(date),
            location=location,
            created_at=now,
            updated_at=now,
        )

    @property
    def booked_seats(self) -> int:
        return self.total_seats - self.available_seats

    @Logger.io
    def edit(
        self,
        *,
        title: Optional[str] = None,
        total_seats: Optional[int] = None,
        price: Decimal | int | str | None = None,
        date: Optional[datetime] = None,
        location: Optional[str] = None,
    ) -> 'Event':
        """
        Admin edit. A new total moves `available_seats` by the same difference,
        so seats already booked stay booked.

        Raises:
            DomainError: empty title, negative price, or a total below the booked seats
        """
        new_title = self.title if title is None else title.strip()
        if not new_title:
            raise DomainError('Event title is required')

        new_total = self.total_seats if total_seats is None else total_seats
        if new_total < 1:
            raise DomainError('Event must have at least 1 seat')
        if new_total < self.booked_seats:
            raise DomainError(
                f'Total seats cannot go below the {self.booked_seats} seats already booked'
            )

        new_price = self.price if price is None else Decimal(str(price))
        if new_price < 0:
            raise DomainError('Price cannot be negative')

        return attrs.evolve(
            self,
            title=new_title,
            total_seats=new_total,
            available_seats=self.available_seats + (new_total - self.total_seats),
            price=new_price,
            date=self.date if date is None else as_utc(date),
            location=self.location if location is None else location,
            updated_at=utc_now(),
        )

    def price_for(self, tickets: int) -> Decimal:
        return self.price * tickets
