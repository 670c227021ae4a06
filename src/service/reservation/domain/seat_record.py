from datetime import datetime
from enum import StrEnum
from typing import Optional

import attrs


class SeatStatus(StrEnum):
    FREE = 'free'
    HELD = 'held'
    BOOKED = 'booked'


@attrs.frozen
class SeatRecord:
    """
    Ledger state of one seat of one show.

    FREE, HELD(holder_id, expires_at) or BOOKED(booking_id). A HELD record past
    its deadline is still stored as HELD until something reclaims it, but every
    reader treats it as FREE.
    """

    status: SeatStatus = SeatStatus.FREE
    holder_id: Optional[str] = None
    expires_at: Optional[datetime] = None
    booking_id: Optional[str] = None

    @classmethod
    def free(cls) -> 'SeatRecord':
        return cls()

    @classmethod
    def held(cls, *, holder_id: str, expires_at: datetime) -> 'SeatRecord':
        return cls(status=SeatStatus.HELD, holder_id=holder_id, expires_at=expires_at)

    @classmethod
    def booked(cls, *, booking_id: str) -> 'SeatRecord':
        return cls(status=SeatStatus.BOOKED, booking_id=booking_id)

    def is_expired_hold(self, now: datetime) -> bool:
        return (
            self.status == SeatStatus.HELD
            and self.expires_at is not None
            and self.expires_at <= now
        )

    def is_active_hold(self, now: datetime) -> bool:
        return self.status == SeatStatus.HELD and not self.is_expired_hold(now)

    def is_active_hold_of(self, holder_id: str, now: datetime) -> bool:
        return self.is_active_hold(now) and self.holder_id == holder_id

    def is_claimable_by(self, holder_id: str, now: datetime) -> bool:
        if self.status == SeatStatus.FREE or self.is_expired_hold(now):
            return True
        return self.is_active_hold_of(holder_id, now)

    def is_booked_by(self, booking_id: str) -> bool:
        return self.status == SeatStatus.BOOKED and self.booking_id == booking_id

    def effective_status(self, now: datetime) -> SeatStatus:
        return SeatStatus.FREE if self.is_expired_hold(now) else self.status
