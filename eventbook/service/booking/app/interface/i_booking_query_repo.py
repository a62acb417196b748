from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from eventbook.service.booking.app.dto.booking_view import BookingStats
from eventbook.service.booking.domain.entity.booking_entity import Booking


class IBookingQueryRepo(ABC):
    """Repository interface for booking read operations. Lists are newest first."""

    @abstractmethod
    async def get_by_id(self, *, booking_id: UUID) -> Optional[Booking]:
        pass

    @abstractmethod
    async def get_by_idempotency_key(
        self, *, user_id: int, idempotency_key: str
    ) -> Optional[Booking]:
        pass

    @abstractmethod
    async def has_confirmed_booking(self, *, user_id: int, event_id: int) -> bool:
        pass

    @abstractmethod
    async def list_by_user(self, *, user_id: int) -> List[Booking]:
        pass

    @abstractmethod
    async def list_by_event(self, *, event_id: int) -> List[Booking]:
        pass

    @abstractmethod
    async def list_all(self) -> List[Booking]:
        pass

    @abstractmethod
    async def get_stats(self) -> BookingStats:
        pass
