"""Mock email notifier: logs the message instead of sending it."""

from collections import deque
from typing import Any, Deque, Dict

from src.platform.logging.loguru_io import Logger
from src.service.shared_kernel.domain.clock import Clock, utc_now
from src.service.ticketing.app.interface.i_booking_notifier import IBookingNotifier
from src.service.ticketing.domain.entity.booking_entity import Booking


OUTBOX_SIZE = 100


class MockEmailBookingNotifierImpl(IBookingNotifier):
    def __init__(self, *, clock: Clock = utc_now, outbox_size: int = OUTBOX_SIZE) -> None:
        self._clock = clock
        # Most recent messages only
        self.sent: Deque[Dict[str, Any]] = deque(maxlen=outbox_size)

    def _send(self, *, booking: Booking, subject: str, body: str) -> None:
        self.sent.append(
            {
                'user_id': booking.user_id,
                'booking_id': booking.id,
                'subject': subject,
                'body': body,
                'sent_at': self._clock(),
            }
        )
        Logger.base.info(f'📧 [MOCK-EMAIL] to user={booking.user_id} | {subject}')

    @Logger.io
    async def notify_confirmed(self, *, booking: Booking) -> None:
        self._send(
            booking=booking,
            subject=f'Booking Confirmed - #{booking.id}',
            body=(
                f'Your seats {", ".join(booking.seat_codes)} are booked. '
                f'Amount paid: INR {booking.total_amount} '
                f'(USD {booking.total_amount_usd:.2f}).'
            ),
        )

    @Logger.io
    async def notify_expired(self, *, booking: Booking) -> None:
        self._send(
            booking=booking,
            subject=f'Booking Expired - #{booking.id}',
            body=(
                f'Your hold on seats {", ".join(booking.seat_codes)} expired before payment '
                'was confirmed. Any amount charged will be refunded.'
            ),
        )
