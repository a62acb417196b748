from abc import ABC, abstractmethod
from typing import Dict, Iterable, Optional

from eventbook.service.booking.domain.entity.event_entity import Event


class IEventCatalogRepo(ABC):
    @abstractmethod
    async def get_event(self, *, event_id: int) -> Optional[Event]:
        pass

    @abstractmethod
    async def get_events(self, *, event_ids: Iterable[int]) -> Dict[int, Event]:
        pass

    @abstractmethod
    async def create_event(self, *, event: Event) -> Event:
        pass

    @abstractmethod
    async def reserve_seats(self, *, event_id: int, tickets: int) -> bool:
        """Take `tickets` seats only if that many are available. False when they are not."""
        pass

    @abstractmethod
    async def release_seats(self, *, event_id: int, tickets: int) -> bool:
        """Return `tickets` seats only if that keeps available <= total. False otherwise."""
        pass

    @abstractmethod
    async def update_event(self, *, event: Event) -> Optional[Event]:
        """
        Store an admin edit. `available_seats` moves by the change in `total_seats`
        against the stored row. None when the new total is below the seats booked
        by then.
        """
        pass
