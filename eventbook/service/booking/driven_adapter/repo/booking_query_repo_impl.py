from contextlib import asynccontextmanager
from decimal import Decimal
from typing import AsyncContextManager, AsyncIterator, Callable, List, Optional
from uuid import UUID

from sqlalchemy import Select, case, exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from eventbook.platform.logging.loguru_io import Logger
from eventbook.platform.types.utc_datetime import as_utc
from eventbook.service.booking.app.dto.booking_view import BookingStats
from eventbook.service.booking.app.interface.i_booking_query_repo import IBookingQueryRepo
from eventbook.service.booking.domain.entity.booking_entity import Booking, BookingStatus
from eventbook.service.booking.driven_adapter.model.booking_model import BookingModel


class BookingQueryRepoImpl(IBookingQueryRepo):
    def __init__(
        self,
        *,
        session_factory: Callable[..., AsyncContextManager[AsyncSession]] | None = None,
        session: AsyncSession | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.session = session

    @asynccontextmanager
    async def _get_session(self) -> AsyncIterator[AsyncSession]:
        """Use the Unit of Work session when one was injected, otherwise open a short one."""
        if self.session is not None:
            yield self.session
        elif self.session_factory is not None:
            async with self.session_factory() as session:
                yield session
        else:
            raise RuntimeError('No session or session_factory available')

    @staticmethod
    def _to_entity(db_booking: BookingModel) -> Booking:
        return Booking(
            id=db_booking.id,
            user_id=db_booking.user_id,
            event_id=db_booking.event_id,
            tickets=db_booking.tickets,
            total_price=Decimal(db_booking.total_price),
            booking_code=db_booking.booking_code,
            status=BookingStatus(db_booking.status),
            idempotency_key=db_booking.idempotency_key,
            payment_reference=db_booking.payment_reference,
            created_at=as_utc(db_booking.created_at),
            updated_at=as_utc(db_booking.updated_at),
            cancelled_at=as_utc(db_booking.cancelled_at),
        )

    @staticmethod
    def _newest_first(stmt: Select) -> Select:
        return stmt.order_by(BookingModel.created_at.desc(), BookingModel.id.desc())

    async def _fetch_many(self, stmt: Select) -> List[Booking]:
        async with self._get_session() as session:
            result = await session.execute(self._newest_first(stmt))
            return [self._to_entity(row) for row in result.scalars().all()]

    @Logger.io
    async def get_by_id(self, *, booking_id: UUID) -> Optional[Booking]:
        async with self._get_session() as session:
            result = await session.execute(
                select(BookingModel).where(BookingModel.id == booking_id)
            )
            db_booking = result.scalar_one_or_none()
            return self._to_entity(db_booking) if db_booking else None

    @Logger.io
    async def get_by_idempotency_key(
        self, *, user_id: int, idempotency_key: str
    ) -> Optional[Booking]:
        async with self._get_session() as session:
            result = await session.execute(
                select(BookingModel).where(
                    BookingModel.user_id == user_id,
                    BookingModel.idempotency_key == idempotency_key,
                )
            )
            db_booking = result.scalar_one_or_none()
            return self._to_entity(db_booking) if db_booking else None

    @Logger.io
    async def has_confirmed_booking(self, *, user_id: int, event_id: int) -> bool:
        async with self._get_session() as session:
            result = await session.execute(
                select(
                    exists().where(
                        BookingModel.user_id == user_id,
                        BookingModel.event_id == event_id,
                        BookingModel.status == BookingStatus.CONFIRMED.value,
                    )
                )
            )
            return bool(result.scalar())

    @Logger.io
    async def list_by_user(self, *, user_id: int) -> List[Booking]:
        return await self._fetch_many(
            select(BookingModel).where(BookingModel.user_id == user_id)
        )

    @Logger.io
    async def list_by_event(self, *, event_id: int) -> List[Booking]:
        return await self._fetch_many(
            select(BookingModel).where(BookingModel.event_id == event_id)
        )

    @Logger.io
    async def list_all(self) -> List[Booking]:
        return await self._fetch_many(select(BookingModel))

    @Logger.io
    async def get_stats(self) -> BookingStats:
        is_confirmed = BookingModel.status == BookingStatus.CONFIRMED.value
        is_cancelled = BookingModel.status == BookingStatus.CANCELLED.value
        async with self._get_session() as session:
            result = await session.execute(
                select(
                    func.count(BookingModel.id),
                    func.coalesce(func.sum(case((is_confirmed, 1), else_=0)), 0),
                    func.coalesce(func.sum(case((is_cancelled, 1), else_=0)), 0),
                    func.coalesce(
                        func.sum(case((is_confirmed, BookingModel.total_price), else_=0)), 0
                    ),
                )
            )
            total, confirmed, cancelled, revenue = result.one()
            return BookingStats(
                total_bookings=int(total),
                confirmed_bookings=int(confirmed),
                cancelled_bookings=int(cancelled),
                total_revenue=Decimal(str(revenue)).quantize(Decimal('0.01')),
            )
