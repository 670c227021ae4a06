"""
In-process Reservation Ledger (single node).

One asyncio.Lock per (show, seat). Multi-seat operations acquire the locks of
all involved seats in lexicographic seat-code order, evaluate, then apply the
transition with no awaits in between. Readers never take the locks.
"""

import asyncio
from collections import defaultdict
from contextlib import AsyncExitStack, asynccontextmanager
from datetime import timedelta
from typing import AsyncIterator, Dict, Iterable, List

from src.platform.logging.loguru_io import Logger
from src.service.reservation.app.interface.i_reservation_ledger import IReservationLedger
from src.service.reservation.domain.hold_token import HoldToken, ReclaimResult
from src.service.reservation.domain.reservation_error import (
    HoldExpiredError,
    HoldNotOwnedError,
    SeatsUnavailableError,
)
from src.service.reservation.domain.seat_record import SeatRecord, SeatStatus
from src.service.shared_kernel.domain.clock import Clock, utc_now


class InMemoryReservationLedgerImpl(IReservationLedger):
    def __init__(self, *, clock: Clock = utc_now) -> None:
        self._clock = clock
        self._records: Dict[str, Dict[str, SeatRecord]] = {}
        self._locks: Dict[str, Dict[str, asyncio.Lock]] = defaultdict(
            lambda: defaultdict(asyncio.Lock)
        )

    @asynccontextmanager
    async def _seat_locks(self, show_id: str, sorted_codes: List[str]) -> AsyncIterator[None]:
        async with AsyncExitStack() as stack:
            show_locks = self._locks[show_id]
            for seat_code in sorted_codes:
                await stack.enter_async_context(show_locks[seat_code])
            yield

    def _get(self, show_id: str, seat_code: str) -> SeatRecord:
        return self._records.get(show_id, {}).get(seat_code, SeatRecord.free())

    def _put(self, show_id: str, seat_code: str, record: SeatRecord) -> None:
        self._records.setdefault(show_id, {})[seat_code] = record

    async def initialize_show(self, *, show_id: str, seat_codes: Iterable[str]) -> None:
        show_records = self._records.setdefault(show_id, {})
        for seat_code in sorted(set(seat_codes)):
            show_records.setdefault(seat_code, SeatRecord.free())

    @Logger.io
    async def try_claim(
        self, *, show_id: str, seat_codes: Iterable[str], holder_id: str, ttl: timedelta
    ) -> HoldToken:
        codes = sorted(set(seat_codes))
        async with self._seat_locks(show_id, codes):
            now = self._clock()
            current = {code: self._get(show_id, code) for code in codes}

            conflicts = [
                code for code, record in current.items()
                if not record.is_claimable_by(holder_id, now)
            ]
            if conflicts:
                raise SeatsUnavailableError(conflicts)

            deadline = now + ttl
            expires_at = deadline
            for code, record in current.items():
                if record.is_active_hold_of(holder_id, now):
                    # Re-claim by the same holder keeps the original deadline
                    expires_at = min(expires_at, record.expires_at)  # type: ignore[type-var]
                    continue
                self._put(show_id, code, SeatRecord.held(holder_id=holder_id, expires_at=deadline))

        return HoldToken(
            show_id=show_id, holder_id=holder_id, seat_codes=tuple(codes), expires_at=expires_at
        )

    @Logger.io
    async def confirm(
        self, *, show_id: str, seat_codes: Iterable[str], holder_id: str, booking_id: str
    ) -> None:
        codes = sorted(set(seat_codes))
        async with self._seat_locks(show_id, codes):
            now = self._clock()
            current = {code: self._get(show_id, code) for code in codes}

            not_owned = [
                code for code, record in current.items()
                if (record.is_active_hold(now) and record.holder_id != holder_id)
                or (record.status == SeatStatus.BOOKED and record.booking_id != booking_id)
            ]
            if not_owned:
                raise HoldNotOwnedError(f'Seats held by another booking: {", ".join(not_owned)}')

            expired = [
                code for code, record in current.items()
                if not record.is_booked_by(booking_id)
                and not record.is_active_hold_of(holder_id, now)
            ]
            if expired:
                raise HoldExpiredError(f'Hold expired for seats: {", ".join(expired)}')

            for code, record in current.items():
                if record.status == SeatStatus.HELD:
                    self._put(show_id, code, SeatRecord.booked(booking_id=booking_id))

    @Logger.io
    async def release(
        self, *, show_id: str, seat_codes: Iterable[str], holder_id: str
    ) -> List[str]:
        codes = sorted(set(seat_codes))
        released: List[str] = []
        async with self._seat_locks(show_id, codes):
            for code in codes:
                record = self._get(show_id, code)
                if record.status == SeatStatus.HELD and record.holder_id == holder_id:
                    self._put(show_id, code, SeatRecord.free())
                    released.append(code)
        return released

    async def list_state(self, *, show_id: str) -> Dict[str, SeatStatus]:
        now = self._clock()
        snapshot = dict(self._records.get(show_id, {}))
        return {code: record.effective_status(now) for code, record in sorted(snapshot.items())}

    @Logger.io
    async def sweep_expired(self, *, show_id: str) -> Dict[str, List[str]]:
        now = self._clock()
        candidates = sorted(
            code
            for code, record in self._records.get(show_id, {}).items()
            if record.is_expired_hold(now)
        )
        reclaimed: Dict[str, List[str]] = {}
        if not candidates:
            return reclaimed

        async with self._seat_locks(show_id, candidates):
            now = self._clock()
            for code in candidates:
                record = self._get(show_id, code)
                # Re-check: a confirm or claim may have won the lock first
                if not record.is_expired_hold(now):
                    continue
                self._put(show_id, code, SeatRecord.free())
                reclaimed.setdefault(record.holder_id or '', []).append(code)
        return reclaimed

    @Logger.io
    async def reclaim_hold(
        self, *, show_id: str, seat_codes: Iterable[str], holder_id: str
    ) -> ReclaimResult:
        codes = sorted(set(seat_codes))
        released: List[str] = []
        booked = False
        async with self._seat_locks(show_id, codes):
            now = self._clock()
            for code in codes:
                record = self._get(show_id, code)
                if record.is_booked_by(holder_id):
                    booked = True
                elif record.holder_id == holder_id and record.is_expired_hold(now):
                    self._put(show_id, code, SeatRecord.free())
                    released.append(code)
        return ReclaimResult(released_seats=tuple(released), booked=booked)

    async def list_show_ids(self) -> List[str]:
        return sorted(self._records)

    async def get_record(self, *, show_id: str, seat_code: str) -> SeatRecord:
        """Raw record, including expired holds not yet reclaimed."""
        return self._get(show_id, seat_code)
