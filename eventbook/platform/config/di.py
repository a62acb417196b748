"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from datetime import timedelta

from dependency_injector import containers, providers

from eventbook.platform.config.core_setting import Settings
from eventbook.platform.database.orm_db_setting import Database
from eventbook.platform.database.unit_of_work import SqlAlchemyUnitOfWork
from eventbook.service.booking.app.booking_ledger import BookingLedger
from eventbook.service.booking.app.command.cancel_booking_use_case import CancelBookingUseCase
from eventbook.service.booking.app.command.create_booking_use_case import CreateBookingUseCase
from eventbook.service.booking.app.query.booking_stats_use_case import BookingStatsUseCase
from eventbook.service.booking.app.query.get_booking_use_case import GetBookingUseCase
from eventbook.service.booking.app.query.list_bookings_use_case import ListBookingsUseCase
from eventbook.service.booking.domain.value_object.booking_code import BookingCodeGenerator
from eventbook.service.booking.driven_adapter.repo.booking_query_repo_impl import (
    BookingQueryRepoImpl,
)
from eventbook.service.booking.driven_adapter.repo.event_catalog_repo_impl import (
    EventCatalogRepoImpl,
)
from eventbook.service.booking.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Database: owns the engine / connection pool, disposed by the app lifespan
    database = providers.Singleton(
        Database,
        url=config_service.provided.DATABASE_URL_ASYNC,
        pool_size=config_service.provided.DB_POOL_SIZE,
        max_overflow=config_service.provided.DB_POOL_MAX_OVERFLOW,
        pool_timeout=config_service.provided.DB_POOL_TIMEOUT,
        pool_recycle=config_service.provided.DB_POOL_RECYCLE,
        pool_pre_ping=config_service.provided.DB_POOL_PRE_PING,
    )

    # One Unit of Work (and transaction) per call
    unit_of_work = providers.Factory(
        SqlAlchemyUnitOfWork, session_factory=database.provided.session
    )

    # Read-side repositories (short sessions per query)
    booking_query_repo = providers.Singleton(
        BookingQueryRepoImpl, session_factory=database.provided.session
    )
    event_catalog_repo = providers.Singleton(
        EventCatalogRepoImpl, session_factory=database.provided.session
    )

    # Auth
    jwt_auth = providers.Singleton(JwtAuth)

    booking_code_generator = providers.Singleton(
        BookingCodeGenerator, length=config_service.provided.BOOKING_CODE_LENGTH
    )

    # Use cases
    create_booking_use_case = providers.Singleton(
        CreateBookingUseCase,
        uow_factory=unit_of_work.provider,
        code_generator=booking_code_generator,
        max_code_attempts=config_service.provided.BOOKING_CODE_MAX_ATTEMPTS,
    )
    cancel_booking_use_case = providers.Singleton(
        CancelBookingUseCase,
        uow_factory=unit_of_work.provider,
        cancellation_window=providers.Factory(
            timedelta, hours=config_service.provided.CANCELLATION_WINDOW_HOURS
        ),
    )
    list_bookings_use_case = providers.Singleton(
        ListBookingsUseCase,
        booking_query_repo=booking_query_repo,
        event_catalog_repo=event_catalog_repo,
    )
    get_booking_use_case = providers.Singleton(
        GetBookingUseCase,
        booking_query_repo=booking_query_repo,
        event_catalog_repo=event_catalog_repo,
    )
    booking_stats_use_case = providers.Singleton(
        BookingStatsUseCase, booking_query_repo=booking_query_repo
    )

    booking_ledger = providers.Singleton(
        BookingLedger,
        create_booking_use_case=create_booking_use_case,
        cancel_booking_use_case=cancel_booking_use_case,
        list_bookings_use_case=list_bookings_use_case,
        get_booking_use_case=get_booking_use_case,
        booking_stats_use_case=booking_stats_use_case,
    )


container = Container()


def setup() -> None:
    container.config_service()


async def cleanup() -> None:
    database = container.database()
    await database.dispose()
    container.reset_singletons()
