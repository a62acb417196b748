import re
from typing import Callable, Optional

from sqlalchemy import Index, UniqueConstraint, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from eventbook.platform.logging.loguru_io import Logger
from eventbook.service.booking.app.interface.i_booking_command_repo import IBookingCommandRepo
from eventbook.service.booking.domain.booking_errors import (
    BookingCodeCollision,
    DuplicateBookingError,
)
from eventbook.service.booking.domain.entity.booking_entity import Booking, BookingStatus
from eventbook.service.booking.driven_adapter.model.booking_model import (
    UQ_BOOKING_CODE,
    UQ_BOOKING_CONFIRMED_USER_EVENT,
    UQ_BOOKING_IDEMPOTENCY_KEY,
    BookingModel,
)


UNIQUE_VIOLATIONS: dict[str, Callable[[], Exception]] = {
    UQ_BOOKING_CODE: lambda: BookingCodeCollision(UQ_BOOKING_CODE),
    UQ_BOOKING_IDEMPOTENCY_KEY: lambda: DuplicateBookingError('This request was already submitted'),
    UQ_BOOKING_CONFIRMED_USER_EVENT: lambda: DuplicateBookingError(),
}

# SQLite names the columns ('booking.user_id, booking.event_id'), or the index for partial ones
_SQLITE_UNIQUE = re.compile(
    r"UNIQUE constraint failed: (?:index '(?P<index>\w+)'|(?P<columns>[\w.]+(?:, [\w.]+)*))"
)


def _unique_names_by_columns() -> dict[frozenset[str], str]:
    table = BookingModel.__table__
    uniques: list[UniqueConstraint | Index] = [
        *(c for c in table.constraints if isinstance(c, UniqueConstraint)),
        *(i for i in table.indexes if i.unique),
    ]
    return {frozenset(column.name for column in u.columns): str(u.name) for u in uniques}


_UNIQUE_BY_COLUMNS = _unique_names_by_columns()


def violated_unique_constraint(e: IntegrityError) -> Optional[str]:
    """Name of the unique constraint behind `e`, None for any other integrity failure."""
    # asyncpg: the adapted DBAPI error wraps a UniqueViolationError carrying the name
    constraint_name = getattr(getattr(e.orig, '__cause__', None), 'constraint_name', None)
    if constraint_name:
        return constraint_name

    match = _SQLITE_UNIQUE.search(str(e.orig))
    if not match:
        return None
    if match.group('index'):
        return match.group('index')
    columns = frozenset(
        part.rsplit('.', 1)[-1].strip() for part in match.group('columns').split(',')
    )
    return _UNIQUE_BY_COLUMNS.get(columns)


class BookingCommandRepoImpl(IBookingCommandRepo):
    """Booking writes. Always runs on the Unit of Work session."""

    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _to_model(booking: Booking) -> BookingModel:
        return BookingModel(
            id=booking.id,
            user_id=booking.user_id,
            event_id=booking.event_id,
            tickets=booking.tickets,
            total_price=booking.total_price,
            booking_code=booking.booking_code,
            status=booking.status.value,
            idempotency_key=booking.idempotency_key,
            payment_reference=booking.payment_reference,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
            cancelled_at=booking.cancelled_at,
        )

    @Logger.io
    async def create(self, *, booking: Booking) -> Booking:
        self.session.add(self._to_model(booking))
        try:
            await self.session.flush()
        except IntegrityError as e:
            to_error = UNIQUE_VIOLATIONS.get(violated_unique_constraint(e) or '')
            if to_error is None:
                raise
            raise to_error() from e
        return booking

    @Logger.io
    async def mark_cancelled(self, *, booking: Booking) -> bool:
        result = await self.session.execute(
            update(BookingModel)
            .where(
                BookingModel.id == booking.id,
                BookingModel.status == BookingStatus.CONFIRMED.value,
            )
            .values(
                status=BookingStatus.CANCELLED.value,
                cancelled_at=booking.cancelled_at,
                updated_at=booking.updated_at,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1  # type: ignore[attr-defined]
