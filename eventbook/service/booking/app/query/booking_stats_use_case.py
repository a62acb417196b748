from eventbook.platform.logging.loguru_io import Logger
from eventbook.service.booking.app.dto.booking_view import BookingStats
from eventbook.service.booking.app.interface.i_booking_query_repo import IBookingQueryRepo
from eventbook.service.booking.domain.booking_errors import UnauthorizedError
from eventbook.service.booking.domain.entity.user_entity import UserRole


class BookingStatsUseCase:
    def __init__(self, *, booking_query_repo: IBookingQueryRepo) -> None:
        self.booking_query_repo = booking_query_repo

    @Logger.io
    async def get_booking_stats(self, *, requester_role: UserRole | str) -> BookingStats:
        """Counts by status and revenue of confirmed bookings. Admin only."""
        if requester_role != UserRole.ADMIN:
            raise UnauthorizedError('Only admins can view booking statistics')
        return await self.booking_query_repo.get_stats()
