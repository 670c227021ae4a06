"""
Expiry Sweeper - periodic background task

Runs ExpireStaleHoldsUseCase every SWEEP_INTERVAL_SECONDS. A failed tick is
logged and counted; the loop keeps going. With the Kvrocks backend a
distributed lock keeps replicas from sweeping at the same time.
"""

import math
import time
from typing import Callable, Optional

import anyio

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.platform.state.distributed_lock import DistributedLock
from src.platform.state.kvrocks_client import kvrocks_client
from src.service.ticketing.app.command.expire_stale_holds_use_case import (
    ExpireStaleHoldsUseCase,
)
from src.service.ticketing.app.dto.sweep_report import SweepReport


SWEEPER_LOCK_KEY = 'expiry_sweeper_lock'


class ExpirySweeper:
    def __init__(
        self,
        *,
        use_case: ExpireStaleHoldsUseCase,
        interval_seconds: float,
        use_distributed_lock: bool = False,
        lock_factory: Optional[Callable[[], DistributedLock]] = None,
    ) -> None:
        self.use_case = use_case
        self.interval_seconds = interval_seconds
        self.use_distributed_lock = use_distributed_lock
        self._lock_factory = lock_factory or self._default_lock
        # Two intervals: a tick slower than one interval still owns the lock
        self.lock_ttl_seconds = max(1, math.ceil(2 * interval_seconds))
        self.ticks = 0

    def _default_lock(self) -> DistributedLock:
        return DistributedLock(
            client=kvrocks_client.get_client(),
            key=f'{settings.KVROCKS_KEY_PREFIX}{SWEEPER_LOCK_KEY}',
            ttl_seconds=self.lock_ttl_seconds,
        )

    async def run_once(self) -> Optional[SweepReport]:
        """One tick. Returns None when skipped (lock held elsewhere) or failed."""
        self.ticks += 1
        lock = self._lock_factory() if self.use_distributed_lock else None
        if lock and not await lock.acquire():
            return None

        started = time.perf_counter()
        try:
            report = await self.use_case.run()
        except Exception as e:
            metrics.record_sweep_failure(error_type=type(e).__name__)
            Logger.base.error(f'❌ [SWEEPER] Tick {self.ticks} failed: {type(e).__name__}: {e}')
            return None
        finally:
            if lock:
                await lock.release()

        metrics.record_sweep(
            duration=time.perf_counter() - started, released_seats=report.released_seats
        )
        return report

    async def run_forever(self) -> None:
        Logger.base.info(f'🧹 [SWEEPER] Started, interval={self.interval_seconds}s')
        while True:
            await self.run_once()
            await anyio.sleep(self.interval_seconds)
