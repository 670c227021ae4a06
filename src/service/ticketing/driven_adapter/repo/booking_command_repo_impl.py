"""
Booking Command Repository Implementation (Kvrocks)

Storage:
    booking:{booking_id}           Hash {status, payload}
    user_bookings:{user_id}        ZSet booking_id by created_at ms
    booking_pending_deadline       ZSet PENDING booking_id by hold deadline ms

Index entries are written before the booking itself, so a failure leaves at
most a dangling index entry, which readers skip and prune.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable

from opentelemetry import trace
from redis.exceptions import (
    ConnectionError as RedisConnectionError,
    TimeoutError as RedisTimeoutError,
)

from src.platform.exception.exceptions import ConflictError, TransientStoreError
from src.platform.logging.loguru_io import Logger
from src.platform.state.kvrocks_client import KvrocksClientType, kvrocks_client
from src.platform.state.lua_script_executor import lua_script_executor
from src.service.reservation.driven_adapter.state.reservation_helper.seat_record_codec import (
    to_epoch_ms,
)
from src.service.ticketing.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.ticketing.domain.entity.booking_entity import Booking, BookingStatus
from src.service.ticketing.driven_adapter.repo.repo_helper.entity_serializer import dump_booking
from src.service.ticketing.driven_adapter.repo.repo_helper.key_str_generator import (
    make_booking_key,
    make_pending_deadline_key,
    make_user_bookings_key,
)


@asynccontextmanager
async def store_errors(operation: str) -> AsyncIterator[None]:
    try:
        yield
    except (RedisConnectionError, RedisTimeoutError) as e:
        raise TransientStoreError(f'Booking store unavailable during {operation}: {e}') from e


class BookingCommandRepoImpl(IBookingCommandRepo):
    def __init__(
        self, *, client_factory: Callable[[], KvrocksClientType] = kvrocks_client.get_client
    ) -> None:
        self._client_factory = client_factory
        self.tracer = trace.get_tracer(__name__)

    async def _run(self, script: str, *, booking_id: str, args: list) -> int:
        client = self._client_factory()
        await lua_script_executor.initialize(client=client)
        result = await lua_script_executor.run(
            script, client=client, keys=[make_booking_key(booking_id=booking_id)], args=args
        )
        return int(result)

    @Logger.io
    async def create(self, *, booking: Booking) -> Booking:
        with self.tracer.start_as_current_span(
            'db.booking.create', attributes={'booking.id': booking.id}
        ):
            async with store_errors('create_booking'):
                client = self._client_factory()
                await client.zadd(  # type: ignore[misc]
                    make_user_bookings_key(user_id=booking.user_id),
                    {booking.id: to_epoch_ms(booking.created_at or booking.hold_expires_at)},
                )
                await client.zadd(  # type: ignore[misc]
                    make_pending_deadline_key(),
                    {booking.id: to_epoch_ms(booking.hold_expires_at)},
                )
                created = await self._run(
                    'booking_create',
                    booking_id=booking.id,
                    args=[booking.status.value, dump_booking(booking)],
                )

        if not created:
            raise ConflictError(f'Booking {booking.id} already exists')
        return booking

    @Logger.io
    async def update_status(self, *, booking: Booking, expected_status: BookingStatus) -> bool:
        with self.tracer.start_as_current_span(
            'db.booking.update_status',
            attributes={'booking.id': booking.id, 'booking.status': booking.status.value},
        ):
            async with store_errors('update_booking_status'):
                updated = await self._run(
                    'booking_update_status',
                    booking_id=booking.id,
                    args=[expected_status.value, booking.status.value, dump_booking(booking)],
                )
                if updated and booking.status != BookingStatus.PENDING:
                    await self._client_factory().zrem(  # type: ignore[misc]
                        make_pending_deadline_key(), booking.id
                    )

        if not updated:
            Logger.base.info(
                f'🔁 [BOOKING-REPO] CAS {expected_status}->{booking.status} lost for {booking.id}'
            )
        return bool(updated)
