"""
Kvrocks Reservation Ledger (horizontally scaled).

Each show is one hash ``seat_state:{show_id}`` (seat_code -> encoded record)
plus a deadline index ``seat_hold_expiry:{show_id}``. Every multi-seat
transition is one Lua script, so Kvrocks' single-threaded script execution is
the critical section. The current time is passed in from the injected clock
rather than read from the server, keeping expiry decisions consistent with
the in-process backend.
"""

import time
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Any, AsyncIterator, Callable, Dict, Iterable, List

from opentelemetry import trace
from redis.exceptions import (
    ConnectionError as RedisConnectionError,
    TimeoutError as RedisTimeoutError,
)

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import TransientStoreError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.platform.state.kvrocks_client import KvrocksClientType, kvrocks_client
from src.platform.state.lua_script_executor import lua_script_executor
from src.service.reservation.app.interface.i_reservation_ledger import IReservationLedger
from src.service.reservation.domain.hold_token import HoldToken, ReclaimResult
from src.service.reservation.domain.reservation_error import (
    HoldExpiredError,
    HoldNotOwnedError,
    SeatsUnavailableError,
)
from src.service.reservation.domain.seat_record import SeatStatus
from src.service.reservation.driven_adapter.state.reservation_helper.key_str_generator import (
    make_hold_expiry_key,
    make_ledger_shows_key,
    make_seat_state_key,
)
from src.service.reservation.driven_adapter.state.reservation_helper.seat_record_codec import (
    decode_seat_record,
    from_epoch_ms,
    to_epoch_ms,
)
from src.service.shared_kernel.domain.clock import Clock, utc_now


@asynccontextmanager
async def _store_errors(operation: str) -> AsyncIterator[None]:
    try:
        yield
    except (RedisConnectionError, RedisTimeoutError) as e:
        raise TransientStoreError(f'Seat ledger unavailable during {operation}: {e}') from e


class KvrocksReservationLedgerImpl(IReservationLedger):
    def __init__(
        self,
        *,
        clock: Clock = utc_now,
        client_factory: Callable[[], KvrocksClientType] = kvrocks_client.get_client,
        sweep_batch_size: int | None = None,
    ) -> None:
        self._clock = clock
        self._client_factory = client_factory
        self._sweep_batch_size = sweep_batch_size or settings.SWEEP_BATCH_SIZE
        self.tracer = trace.get_tracer(__name__)

    async def _run(self, script: str, *, show_id: str, args: List[Any]) -> Any:
        client = self._client_factory()
        await lua_script_executor.initialize(client=client)
        return await lua_script_executor.run(
            script,
            client=client,
            keys=[make_seat_state_key(show_id=show_id), make_hold_expiry_key(show_id=show_id)],
            args=args,
        )

    def _now_ms(self) -> int:
        return to_epoch_ms(self._clock())

    async def initialize_show(self, *, show_id: str, seat_codes: Iterable[str]) -> None:
        codes = sorted(set(seat_codes))
        async with _store_errors('initialize_show'):
            created = await self._run('ledger_initialize_show', show_id=show_id, args=codes)
            client = self._client_factory()
            await client.sadd(make_ledger_shows_key(), show_id)  # type: ignore[misc]
        Logger.base.info(f'🪑 [LEDGER] show={show_id} initialized {created}/{len(codes)} seats')

    @Logger.io
    async def try_claim(
        self, *, show_id: str, seat_codes: Iterable[str], holder_id: str, ttl: timedelta
    ) -> HoldToken:
        codes = sorted(set(seat_codes))
        now = self._clock()
        expires_ms = to_epoch_ms(now + ttl)
        started = time.perf_counter()

        with self.tracer.start_as_current_span(
            'ledger.try_claim',
            attributes={'show.id': show_id, 'seat.count': len(codes), 'holder.id': holder_id},
        ):
            async with _store_errors('try_claim'):
                status, *rest = await self._run(
                    'ledger_try_claim',
                    show_id=show_id,
                    args=[holder_id, to_epoch_ms(now), expires_ms, *codes],
                )
        metrics.record_claim_duration(backend='kvrocks', duration=time.perf_counter() - started)

        if status == 'CONFLICT':
            raise SeatsUnavailableError(rest)
        return HoldToken(
            show_id=show_id,
            holder_id=holder_id,
            seat_codes=tuple(codes),
            expires_at=from_epoch_ms(int(rest[0])),
        )

    @Logger.io
    async def confirm(
        self, *, show_id: str, seat_codes: Iterable[str], holder_id: str, booking_id: str
    ) -> None:
        codes = sorted(set(seat_codes))
        with self.tracer.start_as_current_span(
            'ledger.confirm', attributes={'show.id': show_id, 'booking.id': booking_id}
        ):
            async with _store_errors('confirm'):
                status, *seats = await self._run(
                    'ledger_confirm',
                    show_id=show_id,
                    args=[holder_id, booking_id, self._now_ms(), *codes],
                )

        if status == 'NOT_OWNED':
            raise HoldNotOwnedError(f'Seats held by another booking: {", ".join(seats)}')
        if status == 'EXPIRED':
            raise HoldExpiredError(f'Hold expired for seats: {", ".join(seats)}')

    @Logger.io
    async def release(
        self, *, show_id: str, seat_codes: Iterable[str], holder_id: str
    ) -> List[str]:
        codes = sorted(set(seat_codes))
        async with _store_errors('release'):
            released = await self._run('ledger_release', show_id=show_id, args=[holder_id, *codes])
        return list(released)

    async def list_state(self, *, show_id: str) -> Dict[str, SeatStatus]:
        now = self._clock()
        async with _store_errors('list_state'):
            raw_records = await self._client_factory().hgetall(  # type: ignore[misc]
                make_seat_state_key(show_id=show_id)
            )
        return {
            code: decode_seat_record(raw).effective_status(now)
            for code, raw in sorted(raw_records.items())
        }

    @Logger.io
    async def sweep_expired(self, *, show_id: str) -> Dict[str, List[str]]:
        reclaimed: Dict[str, List[str]] = {}
        while True:
            async with _store_errors('sweep_expired'):
                processed, *flat = await self._run(
                    'ledger_sweep_expired',
                    show_id=show_id,
                    args=[self._now_ms(), self._sweep_batch_size],
                )
            for holder_id, seat_code in zip(flat[0::2], flat[1::2], strict=True):
                reclaimed.setdefault(holder_id, []).append(seat_code)
            # A full batch may leave more due entries behind
            if int(processed) < self._sweep_batch_size:
                break
        for seats in reclaimed.values():
            seats.sort()
        return reclaimed

    @Logger.io
    async def reclaim_hold(
        self, *, show_id: str, seat_codes: Iterable[str], holder_id: str
    ) -> ReclaimResult:
        codes = sorted(set(seat_codes))
        async with _store_errors('reclaim_hold'):
            booked, *released = await self._run(
                'ledger_reclaim_hold', show_id=show_id, args=[holder_id, self._now_ms(), *codes]
            )
        return ReclaimResult(released_seats=tuple(released), booked=bool(int(booked)))

    async def list_show_ids(self) -> List[str]:
        async with _store_errors('list_show_ids'):
            client = self._client_factory()
            show_ids = await client.smembers(make_ledger_shows_key())  # type: ignore[misc]
        return sorted(show_ids)
