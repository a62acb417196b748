"""
Integration test configuration for the booking service.

Every test gets its own SQLite file, so ledger tests never see each other's
rows. SQLite serializes writers; the conditional seat UPDATEs are what keep
concurrent bookings correct, exactly as on PostgreSQL.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Optional

import pytest
from sqlalchemy import func, select, text

from eventbook.platform.database.orm_db_setting import Database
from eventbook.platform.database.unit_of_work import SqlAlchemyUnitOfWork
from eventbook.platform.types.utc_datetime import utc_now
from eventbook.service.booking.app.booking_ledger import BookingLedger
from eventbook.service.booking.app.command.cancel_booking_use_case import CancelBookingUseCase
from eventbook.service.booking.app.command.create_booking_use_case import CreateBookingUseCase
from eventbook.service.booking.app.command.create_event_use_case import CreateEventUseCase
from eventbook.service.booking.app.query.booking_stats_use_case import BookingStatsUseCase
from eventbook.service.booking.app.query.get_booking_use_case import GetBookingUseCase
from eventbook.service.booking.app.query.list_bookings_use_case import ListBookingsUseCase
from eventbook.service.booking.domain.entity.booking_entity import BookingStatus
from eventbook.service.booking.domain.entity.event_entity import Event
from eventbook.service.booking.domain.value_object.booking_code import BookingCodeGenerator
from eventbook.service.booking.driven_adapter.model.booking_model import BookingModel
from eventbook.service.booking.driven_adapter.repo.booking_query_repo_impl import (
    BookingQueryRepoImpl,
)
from eventbook.service.booking.driven_adapter.repo.event_catalog_repo_impl import (
    EventCatalogRepoImpl,
)


class ScriptedCodeGenerator:
    """Hands out the given codes in order, then repeats the last one."""

    def __init__(self, *codes: str) -> None:
        self._codes = list(codes)

    def generate(self) -> str:
        return self._codes.pop(0) if len(self._codes) > 1 else self._codes[0]


@pytest.fixture
async def database(tmp_path: Path) -> AsyncGenerator[Database, None]:
    db = Database(url=f'sqlite+aiosqlite:///{tmp_path / "eventbook.db"}')
    await db.create_tables()
    yield db
    await db.dispose()


@pytest.fixture
def uow_factory(database: Database) -> Callable[[], SqlAlchemyUnitOfWork]:
    return lambda: SqlAlchemyUnitOfWork(session_factory=database.session)


@pytest.fixture
def build_ledger(
    database: Database, uow_factory: Callable[[], SqlAlchemyUnitOfWork]
) -> Callable[..., BookingLedger]:
    def _build(
        *,
        code_generator: Any = None,
        max_code_attempts: int = 5,
        clock: Callable[[], datetime] = utc_now,
    ) -> BookingLedger:
        booking_query_repo = BookingQueryRepoImpl(session_factory=database.session)
        event_catalog_repo = EventCatalogRepoImpl(session_factory=database.session)
        return BookingLedger(
            create_booking_use_case=CreateBookingUseCase(
                uow_factory=uow_factory,
                code_generator=code_generator or BookingCodeGenerator(),
                max_code_attempts=max_code_attempts,
            ),
            cancel_booking_use_case=CancelBookingUseCase(uow_factory=uow_factory, clock=clock),
            list_bookings_use_case=ListBookingsUseCase(
                booking_query_repo=booking_query_repo, event_catalog_repo=event_catalog_repo
            ),
            get_booking_use_case=GetBookingUseCase(
                booking_query_repo=booking_query_repo, event_catalog_repo=event_catalog_repo
            ),
            booking_stats_use_case=BookingStatsUseCase(booking_query_repo=booking_query_repo),
        )

    return _build


@pytest.fixture
def ledger(build_ledger: Callable[..., BookingLedger]) -> BookingLedger:
    return build_ledger()


@pytest.fixture
def create_event(
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
) -> Callable[..., Awaitable[Event]]:
    async def _create(
        *,
        total_seats: int = 10,
        price: str = '500.00',
        starts_in: timedelta = timedelta(days=7),
        title: str = 'Rust Meetup',
        location: Optional[str] = 'Hall B',
    ) -> Event:
        return await CreateEventUseCase(uow_factory=uow_factory).create_event(
            title=title,
            total_seats=total_seats,
            price=price,  # type: ignore[arg-type]
            date=utc_now() + starts_in,
            location=location,
        )

    return _create


@pytest.fixture
def get_event(database: Database) -> Callable[[int], Awaitable[Event]]:
    async def _get(event_id: int) -> Event:
        event = await EventCatalogRepoImpl(session_factory=database.session).get_event(
            event_id=event_id
        )
        assert event is not None
        return event

    return _get


@pytest.fixture
def assert_seats_consistent(
    database: Database, get_event: Callable[[int], Awaitable[Event]]
) -> Callable[[int], Awaitable[None]]:
    """available_seats == total_seats - sum(tickets of confirmed bookings)"""

    async def _assert(event_id: int) -> None:
        event = await get_event(event_id)
        async with database.session() as session:
            booked = await session.scalar(
                select(func.coalesce(func.sum(BookingModel.tickets), 0)).where(
                    BookingModel.event_id == event_id,
                    BookingModel.status == BookingStatus.CONFIRMED.value,
                )
            )
        assert 0 <= event.available_seats <= event.total_seats
        assert event.available_seats == event.total_seats - booked

    return _assert


@pytest.fixture
def execute_sql(database: Database) -> Callable[..., Awaitable[None]]:
    """Raw write that bypasses the ledger, for setting up corrupted state."""

    async def _execute(statement: str, **params: Any) -> None:
        async with database.session() as session:
            await session.execute(text(statement), params)
            await session.commit()

    return _execute


@pytest.fixture
def scripted_codes() -> Callable[..., ScriptedCodeGenerator]:
    return ScriptedCodeGenerator
