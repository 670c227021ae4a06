from abc import ABC, abstractmethod

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.domain.entity.booking_entity import Booking, BookingStatus


class IBookingNotifier(ABC):
    """Customer notification after terminal transitions. Best effort only."""

    @abstractmethod
    async def notify_confirmed(self, *, booking: Booking) -> None:
        pass

    @abstractmethod
    async def notify_expired(self, *, booking: Booking) -> None:
        pass


async def notify_best_effort(notifier: IBookingNotifier, *, booking: Booking) -> None:
    """Send the notification matching the booking's status; failures are logged only."""

    try:
        if booking.status == BookingStatus.CONFIRMED:
            await notifier.notify_confirmed(booking=booking)
        elif booking.status == BookingStatus.EXPIRED:
            await notifier.notify_expired(booking=booking)
    except Exception as e:
        Logger.base.warning(
            f'📭 [NOTIFY] {booking.status} notification failed for booking={booking.id}: '
            f'{type(e).__name__}: {e}'
        )
