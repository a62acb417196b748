from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from eventbook.platform.config.di import Container
from eventbook.platform.database.unit_of_work import AbstractUnitOfWork
from eventbook.platform.logging.loguru_io import Logger
from eventbook.service.booking.domain.entity.event_entity import Event


class CreateEventUseCase:
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
    async def create_event(
        self,
        *,
        title: str,
        total_seats: int,
        price: Decimal,
        date: datetime,
        location: Optional[str] = None,
    ) -> Event:
        event = Event.create(
            title=title, total_seats=total_seats, price=price, date=date, location=location
        )
        async with self.uow_factory() as uow:
            event = await uow.event_catalog_repo.create_event(event=event)
            await uow.commit()

        Logger.base.info(f'🎪 [CREATE-EVENT] Event {event.id} created with {total_seats} seats')
        return event
