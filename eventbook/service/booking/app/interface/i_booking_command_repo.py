from abc import ABC, abstractmethod

from eventbook.service.booking.domain.entity.booking_entity import Booking


class IBookingCommandRepo(ABC):
    @abstractmethod
    async def create(self, *, booking: Booking) -> Booking:
        """
        Insert a confirmed booking.

        Raises:
            BookingCodeCollision: booking_code already taken
            DuplicateBookingError: user already holds a confirmed booking for the event,
                or the idempotency key was already used by this user
        """
        pass

    @abstractmethod
    async def mark_cancelled(self, *, booking: Booking) -> bool:
        """Flip confirmed -> cancelled. False when the stored booking was no longer confirmed."""
        pass
