from datetime import datetime
from enum import StrEnum
from typing import List, Optional, Sequence

import attrs

from src.platform.exception.exceptions import ValidationError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.domain.booking_error import InvalidBookingStateError


class BookingStatus(StrEnum):
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'
    EXPIRED = 'expired'


@attrs.frozen
class BookedSeat:
    seat_code: str
    tier_name: str
    price: int


@attrs.define
class Booking:
    id: str
    show_id: str
    user_id: str
    seats: List[BookedSeat]
    total_amount: int
    total_amount_usd: float
    hold_expires_at: datetime
    status: BookingStatus = BookingStatus.PENDING
    payment_ref: Optional[str] = None
    cancellation_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    expired_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        id: str,
        show_id: str,
        user_id: str,
        seats: Sequence[BookedSeat],
        hold_expires_at: datetime,
        now: datetime,
        inr_to_usd_rate: float,
    ) -> 'Booking':
        if not seats:
            raise ValidationError('A booking needs at least one seat')
        codes = [seat.seat_code for seat in seats]
        if len(set(codes)) != len(codes):
            raise ValidationError('Booking seats must be unique')

        # Priced once at hold time; later tier changes never touch this booking
        total_amount = sum(seat.price for seat in seats)
        return cls(
            id=id,
            show_id=show_id,
            user_id=user_id,
            seats=list(seats),
            total_amount=total_amount,
            total_amount_usd=round(total_amount * inr_to_usd_rate, 2),
            hold_expires_at=hold_expires_at,
            status=BookingStatus.PENDING,
            created_at=now,
            updated_at=now,
        )

    @property
    def seat_codes(self) -> List[str]:
        return [seat.seat_code for seat in self.seats]

    @property
    def is_pending(self) -> bool:
        return self.status == BookingStatus.PENDING

    def is_hold_expired(self, now: datetime) -> bool:
        return self.hold_expires_at <= now

    def _ensure_pending(self, action: str) -> None:
        if not self.is_pending:
            raise InvalidBookingStateError(
                f'Cannot {action} a {self.status} booking', status=self.status
            )

    @Logger.io
    def confirm(self, *, payment_ref: str, now: datetime) -> 'Booking':
        self._ensure_pending('confirm')
        return attrs.evolve(
            self,
            status=BookingStatus.CONFIRMED,
            payment_ref=payment_ref,
            confirmed_at=now,
            updated_at=now,
        )

    @Logger.io
    def cancel(self, *, reason: Optional[str], now: datetime) -> 'Booking':
        self._ensure_pending('cancel')
        return attrs.evolve(
            self,
            status=BookingStatus.CANCELLED,
            cancellation_reason=reason,
            cancelled_at=now,
            updated_at=now,
        )

    @Logger.io
    def expire(self, *, now: datetime) -> 'Booking':
        self._ensure_pending('expire')
        return attrs.evolve(self, status=BookingStatus.EXPIRED, expired_at=now, updated_at=now)
