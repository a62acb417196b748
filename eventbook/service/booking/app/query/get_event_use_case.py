from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from eventbook.platform.config.di import Container
from eventbook.platform.exception.exceptions import NotFoundError
from eventbook.platform.logging.loguru_io import Logger
from eventbook.service.booking.app.interface.i_event_catalog_repo import IEventCatalogRepo
from eventbook.service.booking.domain.entity.event_entity import Event


class GetEventUseCase:
    def __init__(self, *, event_catalog_repo: IEventCatalogRepo) -> None:
        self.event_catalog_repo = event_catalog_repo

    @classmethod
    @inject
    def depends(
        cls,
        event_catalog_repo: IEventCatalogRepo = Depends(Provide[Container.event_catalog_repo]),
    ) -> Self:
        return cls(event_catalog_repo=event_catalog_repo)

    @Logger.io
    async def get_event(self, *, event_id: int) -> Event:
        event = await self.event_catalog_repo.get_event(event_id=event_id)
        if not event:
            raise NotFoundError('Event not found')
        return event
