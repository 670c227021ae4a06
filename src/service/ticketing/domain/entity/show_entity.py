from datetime import datetime
from typing import Optional

import attrs

from src.platform.exception.exceptions import DomainError
from src.service.ticketing.domain.value_object.seat_map import SeatMap


@attrs.define
class Show:
    id: str
    movie_id: str
    theatre_id: str
    screen_id: str
    starts_at: datetime
    seat_map: SeatMap
    is_active: bool = True
    created_at: Optional[datetime] = None

    def ensure_bookable(self, now: datetime) -> None:
        if not self.is_active:
            raise DomainError('This show is no longer available')
        if self.starts_at <= now:
            raise DomainError('Cannot book for past shows')
