"""
Unit of Work - one database transaction shared by the booking and event repositories

Usage:
    async with uow_factory() as uow:
        await uow.event_catalog_repo.reserve_seats(...)
        await uow.booking_command_repo.create(...)
        await uow.commit()

Leaving the block without `commit()` rolls everything back.
"""

from __future__ import annotations

import abc
from contextlib import AbstractAsyncContextManager
from types import TracebackType
from typing import TYPE_CHECKING, Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from eventbook.platform.exception.exceptions import TransactionAbortedError
from eventbook.platform.logging.loguru_io import Logger


if TYPE_CHECKING:
    from eventbook.service.booking.app.interface.i_booking_command_repo import (
        IBookingCommandRepo,
    )
    from eventbook.service.booking.app.interface.i_booking_query_repo import IBookingQueryRepo
    from eventbook.service.booking.app.interface.i_event_catalog_repo import IEventCatalogRepo


class AbstractUnitOfWork(abc.ABC):
    booking_command_repo: IBookingCommandRepo
    booking_query_repo: IBookingQueryRepo
    event_catalog_repo: IEventCatalogRepo

    async def __aenter__(self) -> AbstractUnitOfWork:
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.rollback()

    async def commit(self) -> None:
        await self._commit()

    @abc.abstractmethod
    async def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def rollback(self) -> None:
        raise NotImplementedError


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    def __init__(
        self, *, session_factory: Callable[[], AbstractAsyncContextManager[AsyncSession]]
    ) -> None:
        self.session_factory = session_factory
        self._session_cm: Optional[AbstractAsyncContextManager[AsyncSession]] = None
        self.session: Optional[AsyncSession] = None

    async def __aenter__(self) -> AbstractUnitOfWork:
        from eventbook.service.booking.driven_adapter.repo.booking_command_repo_impl import (
            BookingCommandRepoImpl,
        )
        from eventbook.service.booking.driven_adapter.repo.booking_query_repo_impl import (
            BookingQueryRepoImpl,
        )
        from eventbook.service.booking.driven_adapter.repo.event_catalog_repo_impl import (
            EventCatalogRepoImpl,
        )

        self._session_cm = self.session_factory()
        self.session = await self._session_cm.__aenter__()

        # Repositories share the UoW session
        self.booking_command_repo = BookingCommandRepoImpl(session=self.session)
        self.booking_query_repo = BookingQueryRepoImpl(session=self.session)
        self.event_catalog_repo = EventCatalogRepoImpl(session=self.session)

        return await super().__aenter__()

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        assert self._session_cm is not None
        try:
            await super().__aexit__(exc_type, exc, tb)
        finally:
            await self._session_cm.__aexit__(exc_type, exc, tb)
            self._session_cm = None
            self.session = None

    async def _commit(self) -> None:
        assert self.session is not None
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            Logger.base.error(f'💥 [UoW] Commit failed: {type(e).__name__}: {e}')
            raise TransactionAbortedError() from e

    async def rollback(self) -> None:
        if self.session is not None:
            await self.session.rollback()
