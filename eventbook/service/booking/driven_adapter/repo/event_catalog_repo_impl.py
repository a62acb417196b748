from contextlib import asynccontextmanager
from decimal import Decimal
from typing import AsyncContextManager, AsyncIterator, Callable, Dict, Iterable, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from eventbook.platform.logging.loguru_io import Logger
from eventbook.platform.types.utc_datetime import as_utc
from eventbook.service.booking.app.interface.i_event_catalog_repo import IEventCatalogRepo
from eventbook.service.booking.domain.entity.event_entity import Event
from eventbook.service.booking.driven_adapter.model.event_model import EventModel


class EventCatalogRepoImpl(IEventCatalogRepo):
    """
    Event rows and their seat counters.

    Seat changes are single conditional UPDATEs; the row lock taken by the UPDATE
    orders concurrent bookings on the same event, so no read-modify-write happens
    in Python.
    """

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
        if self.session is not None:
            yield self.session
        elif self.session_factory is not None:
            async with self.session_factory() as session:
                yield session
        else:
            raise RuntimeError('No session or session_factory available')

    @staticmethod
    def _to_entity(db_event: EventModel) -> Event:
        return Event(
            id=db_event.id,
            title=db_event.title,
            total_seats=db_event.total_seats,
            available_seats=db_event.available_seats,
            price=Decimal(db_event.price),
            date=as_utc(db_event.date),
            location=db_event.location,
            created_at=as_utc(db_event.created_at),
            updated_at=as_utc(db_event.updated_at),
        )

    @Logger.io
    async def get_event(self, *, event_id: int) -> Optional[Event]:
        async with self._get_session() as session:
            # Always read the stored row, not an identity-map copy from earlier in the UoW
            result = await session.execute(
                select(EventModel)
                .where(EventModel.id == event_id)
                .execution_options(populate_existing=True)
            )
            db_event = result.scalar_one_or_none()
            return self._to_entity(db_event) if db_event else None

    @Logger.io
    async def get_events(self, *, event_ids: Iterable[int]) -> Dict[int, Event]:
        ids = set(event_ids)
        if not ids:
            return {}
        async with self._get_session() as session:
            result = await session.execute(select(EventModel).where(EventModel.id.in_(ids)))
            return {row.id: self._to_entity(row) for row in result.scalars().all()}

    @Logger.io
    async def create_event(self, *, event: Event) -> Event:
        async with self._get_session() as session:
            db_event = EventModel(
                title=event.title,
                total_seats=event.total_seats,
                available_seats=event.available_seats,
                price=event.price,
                date=event.date,
                location=event.location,
                created_at=event.created_at,
                updated_at=event.updated_at,
            )
            session.add(db_event)
            await session.flush()
            return self._to_entity(db_event)

    @Logger.io
    async def reserve_seats(self, *, event_id: int, tickets: int) -> bool:
        async with self._get_session() as session:
            result = await session.execute(
                update(EventModel)
                .where(EventModel.id == event_id, EventModel.available_seats >= tickets)
                .values(available_seats=EventModel.available_seats - tickets)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount == 1  # type: ignore[attr-defined]

    @Logger.io
    async def release_seats(self, *, event_id: int, tickets: int) -> bool:
        async with self._get_session() as session:
            result = await session.execute(
                update(EventModel)
                .where(
                    EventModel.id == event_id,
                    EventModel.available_seats + tickets <= EventModel.total_seats,
                )
                .values(available_seats=EventModel.available_seats + tickets)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount == 1  # type: ignore[attr-defined]

    @Logger.io
    async def update_event(self, *, event: Event) -> Optional[Event]:
        async with self._get_session() as session:
            # Seats are moved relative to the stored row, and only while the new
            # total still covers every seat booked at this moment
            result = await session.execute(
                update(EventModel)
                .where(
                    EventModel.id == event.id,
                    EventModel.total_seats - EventModel.available_seats <= event.total_seats,
                )
                .values(
                    title=event.title,
                    price=event.price,
                    date=event.date,
                    location=event.location,
                    updated_at=event.updated_at,
                    total_seats=event.total_seats,
                    available_seats=EventModel.available_seats
                    + (event.total_seats - EventModel.total_seats),
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:  # type: ignore[attr-defined]
                return None
            stored = await session.execute(
                select(EventModel)
                .where(EventModel.id == event.id)
                .execution_options(populate_existing=True)
            )
            return self._to_entity(stored.scalar_one())
