"""
In-process booking repository (single node).

Command and query sides share one InMemoryBookingStore. Every write is a
plain dict update with no await in between, so compare-and-set is atomic on
the event loop.
"""

from datetime import datetime
from typing import Dict, List, Optional

from src.platform.exception.exceptions import ConflictError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.ticketing.app.interface.i_booking_query_repo import IBookingQueryRepo
from src.service.ticketing.domain.entity.booking_entity import Booking, BookingStatus


class InMemoryBookingStore:
    def __init__(self) -> None:
        self.bookings: Dict[str, Booking] = {}

    def clear(self) -> None:
        self.bookings.clear()


class InMemoryBookingCommandRepoImpl(IBookingCommandRepo):
    def __init__(self, *, store: InMemoryBookingStore) -> None:
        self._store = store

    @Logger.io
    async def create(self, *, booking: Booking) -> Booking:
        if booking.id in self._store.bookings:
            raise ConflictError(f'Booking {booking.id} already exists')
        self._store.bookings[booking.id] = booking
        return booking

    @Logger.io
    async def update_status(self, *, booking: Booking, expected_status: BookingStatus) -> bool:
        current = self._store.bookings.get(booking.id)
        if current is None or current.status != expected_status:
            return False
        self._store.bookings[booking.id] = booking
        return True


class InMemoryBookingQueryRepoImpl(IBookingQueryRepo):
    def __init__(self, *, store: InMemoryBookingStore) -> None:
        self._store = store

    async def get_by_id(self, *, booking_id: str) -> Optional[Booking]:
        return self._store.bookings.get(booking_id)

    async def list_by_user(
        self, *, user_id: str, status: Optional[BookingStatus] = None
    ) -> List[Booking]:
        bookings = [
            booking
            for booking in self._store.bookings.values()
            if booking.user_id == user_id and (status is None or booking.status == status)
        ]
        # UUID7 ids break created_at ties in creation order
        bookings.sort(key=lambda b: (b.created_at or b.hold_expires_at, b.id), reverse=True)
        return bookings

    async def list_pending_past_deadline(self, *, now: datetime, limit: int) -> List[Booking]:
        overdue = [
            booking
            for booking in self._store.bookings.values()
            if booking.is_pending and booking.is_hold_expired(now)
        ]
        overdue.sort(key=lambda b: b.hold_expires_at)
        return overdue[:limit]
