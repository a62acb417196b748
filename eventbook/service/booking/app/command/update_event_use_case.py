from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from eventbook.platform.config.di import Container
from eventbook.platform.database.unit_of_work import AbstractUnitOfWork
from eventbook.platform.exception.exceptions import DomainError, NotFoundError
from eventbook.platform.logging.loguru_io import Logger
from eventbook.service.booking.domain.entity.event_entity import Event


class UpdateEventUseCase:
    """
    Admin edit of an event, including its seat total.

    The edit is checked against the event as read, then stored with a conditional
    UPDATE that re-checks the booked seats on the row itself. A booking that lands
    between the two makes the UPDATE match nothing and the edit is refused.
    """

    def __init__(self, *, uow_factory: Callable[[], AbstractUnitOfWork]) -> None:
        self.uow_factory = uow_factory

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: Callable[[], AbstractUnitOfWork] = Depends(
            Provide[Container.unit_of_work.provider]
        ),
    ) -> Self:
        return cls(uow_factory=uow_factory)

    @Logger.io
    async def update_event(
        self,
        *,
        event_id: int,
        title: Optional[str] = None,
        total_seats: Optional[int] = None,
        price: Optional[Decimal] = None,
        date: Optional[datetime] = None,
        location: Optional[str] = None,
    ) -> Event:
        async with self.uow_factory() as uow:
            event = await uow.event_catalog_repo.get_event(event_id=event_id)
            if not event:
                raise NotFoundError('Event not found')

            edited = event.edit(
                title=title, total_seats=total_seats, price=price, date=date, location=location
            )
            stored = await uow.event_catalog_repo.update_event(event=edited)
            if not stored:
                raise DomainError('Total seats cannot go below the seats already booked')
            await uow.commit()

        Logger.base.info(
            f'🛠️ [UPDATE-EVENT] Event {event_id}: total {event.total_seats} -> '
            f'{stored.total_seats}, available {stored.available_seats}'
        )
        return stored
