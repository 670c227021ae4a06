"""Shared test constants and the controllable clock"""

from datetime import datetime, timedelta, timezone

from src.service.ticketing.domain.value_object.seat_map import SeatTier


# 2025-01-10 10:00 UTC; shows below start the same evening
T0 = datetime(2025, 1, 10, 10, 0, tzinfo=timezone.utc)
SHOW_STARTS_AT = datetime(2025, 1, 10, 18, 30, tzinfo=timezone.utc)

PREMIUM_PRICE = 350
REGULAR_PRICE = 200


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now += timedelta(seconds=seconds)
        return self.now


def default_tiers() -> list[SeatTier]:
    """A1..A3 Premium, B1..B3 and C1..C3 Regular"""
    return [
        SeatTier(tier_name='Premium', price=PREMIUM_PRICE, rows=('A',), seats_per_row=3),
        SeatTier(tier_name='Regular', price=REGULAR_PRICE, rows=('B', 'C'), seats_per_row=3),
    ]
