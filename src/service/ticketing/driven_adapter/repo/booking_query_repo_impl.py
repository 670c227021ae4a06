"""Booking Query Repository Implementation (Kvrocks)"""

from datetime import datetime
from typing import Callable, List, Optional

from src.platform.logging.loguru_io import Logger
from src.platform.state.kvrocks_client import KvrocksClientType, kvrocks_client
from src.service.reservation.driven_adapter.state.reservation_helper.seat_record_codec import (
    to_epoch_ms,
)
from src.service.ticketing.app.interface.i_booking_query_repo import IBookingQueryRepo
from src.service.ticketing.domain.entity.booking_entity import Booking, BookingStatus
from src.service.ticketing.driven_adapter.repo.booking_command_repo_impl import store_errors
from src.service.ticketing.driven_adapter.repo.repo_helper.entity_serializer import load_booking
from src.service.ticketing.driven_adapter.repo.repo_helper.key_str_generator import (
    make_booking_key,
    make_pending_deadline_key,
    make_user_bookings_key,
)


class BookingQueryRepoImpl(IBookingQueryRepo):
    def __init__(
        self, *, client_factory: Callable[[], KvrocksClientType] = kvrocks_client.get_client
    ) -> None:
        self._client_factory = client_factory

    async def _load_many(self, booking_ids: List[str]) -> List[Optional[Booking]]:
        if not booking_ids:
            return []
        client = self._client_factory()
        async with client.pipeline(transaction=False) as pipe:
            for booking_id in booking_ids:
                pipe.hget(make_booking_key(booking_id=booking_id), 'payload')
            payloads = await pipe.execute()
        return [load_booking(raw) if raw else None for raw in payloads]

    @Logger.io
    async def get_by_id(self, *, booking_id: str) -> Optional[Booking]:
        async with store_errors('get_booking'):
            raw = await self._client_factory().hget(  # type: ignore[misc]
                make_booking_key(booking_id=booking_id), 'payload'
            )
        return load_booking(raw) if raw else None

    @Logger.io
    async def list_by_user(
        self, *, user_id: str, status: Optional[BookingStatus] = None
    ) -> List[Booking]:
        async with store_errors('list_user_bookings'):
            booking_ids = await self._client_factory().zrevrange(  # type: ignore[misc]
                make_user_bookings_key(user_id=user_id), 0, -1
            )
            bookings = await self._load_many(list(booking_ids))
        return [
            booking
            for booking in bookings
            if booking is not None and (status is None or booking.status == status)
        ]

    @Logger.io
    async def list_pending_past_deadline(self, *, now: datetime, limit: int) -> List[Booking]:
        index_key = make_pending_deadline_key()
        async with store_errors('list_pending_past_deadline'):
            client = self._client_factory()
            booking_ids = list(
                await client.zrangebyscore(  # type: ignore[misc]
                    index_key, '-inf', to_epoch_ms(now), start=0, num=limit
                )
            )
            bookings = await self._load_many(booking_ids)

            overdue: List[Booking] = []
            stale: List[str] = []
            for booking_id, booking in zip(booking_ids, bookings, strict=True):
                if booking is not None and booking.is_pending:
                    overdue.append(booking)
                else:
                    stale.append(booking_id)
            if stale:
                await client.zrem(index_key, *stale)  # type: ignore[misc]
        return overdue
