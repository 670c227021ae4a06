"""Seat Availability Query Handler - ledger snapshot behind a short per-show cache"""

from datetime import timedelta
from typing import Dict

from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.platform.state.transient_retry import retry_transient
from src.service.reservation.app.interface.i_reservation_ledger import IReservationLedger
from src.service.shared_kernel.domain.clock import Clock, utc_now
from src.service.ticketing.app.dto.availability_snapshot import AvailabilitySnapshot
from src.service.ticketing.app.interface.i_seat_availability_query_handler import (
    ISeatAvailabilityQueryHandler,
)


class SeatAvailabilityQueryHandlerImpl(ISeatAvailabilityQueryHandler):
    """
    Cached view of ledger.list_state

    - Cache hit younger than ttl_seconds → served as is
    - Miss or expired → list_state with transient retry, then cached
    - Local hold / confirm / cancel / expiry → invalidate(show_id)

    ttl_seconds never exceeds the sweep interval (settings validation), so a
    snapshot is never staler than one sweep.
    """

    def __init__(
        self, *, ledger: IReservationLedger, ttl_seconds: float, clock: Clock = utc_now
    ) -> None:
        self.tracer = trace.get_tracer(__name__)
        self._ledger = ledger
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._cache: Dict[str, AvailabilitySnapshot] = {}

    def _is_expired(self, *, snapshot: AvailabilitySnapshot) -> bool:
        return self._clock() - snapshot.snapshot_at > self._ttl

    async def get_snapshot(self, *, show_id: str) -> AvailabilitySnapshot:
        with self.tracer.start_as_current_span(
            'query.cache.seat_availability', attributes={'show.id': show_id}
        ) as span:
            cached = self._cache.get(show_id)
            if cached and not self._is_expired(snapshot=cached):
                span.set_attribute('cache_hit', True)
                return cached

            span.set_attribute('cache_hit', False)
            snapshot_at = self._clock()
            seats = await retry_transient(
                lambda: self._ledger.list_state(show_id=show_id), op_name='list_state'
            )
            snapshot = AvailabilitySnapshot.build(
                show_id=show_id, seats=seats, snapshot_at=snapshot_at
            )
            self._cache[show_id] = snapshot
            return snapshot

    def invalidate(self, *, show_id: str) -> None:
        if self._cache.pop(show_id, None) is not None:
            Logger.base.debug(f'🧽 [AVAILABILITY] cache dropped for show={show_id}')

    def clear(self) -> None:
        self._cache.clear()
