from collections import Counter
from datetime import datetime
from typing import Dict, Mapping

import attrs

from src.service.reservation.domain.seat_record import SeatStatus


@attrs.frozen
class AvailabilitySnapshot:
    show_id: str
    seats: Dict[str, SeatStatus]
    snapshot_at: datetime

    @classmethod
    def build(
        cls, *, show_id: str, seats: Mapping[str, SeatStatus], snapshot_at: datetime
    ) -> 'AvailabilitySnapshot':
        return cls(show_id=show_id, seats=dict(seats), snapshot_at=snapshot_at)

    @property
    def counts(self) -> Dict[str, int]:
        tally = Counter(self.seats.values())
        return {status.value: tally.get(status, 0) for status in SeatStatus}
