from abc import ABC, abstractmethod

from src.service.ticketing.domain.entity.booking_entity import Booking, BookingStatus


class IBookingCommandRepo(ABC):
    """Booking writes. Status changes are compare-and-set on the expected status."""

    @abstractmethod
    async def create(self, *, booking: Booking) -> Booking:
        pass

    @abstractmethod
    async def update_status(self, *, booking: Booking, expected_status: BookingStatus) -> bool:
        """
        Persist ``booking`` only if the stored status still equals expected_status.

        Returns:
            False when another writer changed the booking first
        """
        pass
