from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from src.platform.types import UtilsUUID7
from src.service.ticketing.domain.entity.booking_entity import Booking


class HoldRequest(BaseModel):
    show_id: str
    seat_codes: List[str]

    model_config = {
        'json_schema_extra': {
            'example': {'show_id': 'show-1', 'seat_codes': ['A1', 'A2']}
        }
    }


class ConfirmPaymentRequest(BaseModel):
    booking_id: UtilsUUID7
    payment_ref: str = Field(min_length=1, max_length=128)

    model_config = {
        'json_schema_extra': {
            'example': {
                'booking_id': '01936d8f-5e73-7c4e-a9c5-123456789abc',
                'payment_ref': 'pi_3PqR2x',
            }
        }
    }


class CancelBookingRequest(BaseModel):
    booking_id: UtilsUUID7
    reason: Optional[str] = Field(default=None, max_length=200)


class BookedSeatResponse(BaseModel):
    seat_code: str
    tier_name: str
    price: int


class BookingResponse(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'booking_id': '01936d8f-5e73-7c4e-a9c5-123456789abc',  # UUID7
                'show_id': 'show-1',
                'user_id': 'user-42',
                'seats': [
                    {'seat_code': 'A1', 'tier_name': 'Premium', 'price': 350},
                    {'seat_code': 'A2', 'tier_name': 'Premium', 'price': 350},
                ],
                'total_amount': 700,
                'total_amount_usd': 7.7,
                'status': 'pending',
                'hold_expires_at': '2025-01-10T10:40:00Z',
            }
        },
    }

    booking_id: UtilsUUID7
    show_id: str
    user_id: str
    seats: List[BookedSeatResponse]
    total_amount: int
    total_amount_usd: float
    status: str
    hold_expires_at: datetime
    payment_ref: Optional[str] = None
    cancellation_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    expired_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, booking: Booking) -> 'BookingResponse':
        return cls(
            booking_id=booking.id,
            show_id=booking.show_id,
            user_id=booking.user_id,
            seats=[
                BookedSeatResponse(
                    seat_code=seat.seat_code, tier_name=seat.tier_name, price=seat.price
                )
                for seat in booking.seats
            ],
            total_amount=booking.total_amount,
            total_amount_usd=booking.total_amount_usd,
            status=booking.status.value,
            hold_expires_at=booking.hold_expires_at,
            payment_ref=booking.payment_ref,
            cancellation_reason=booking.cancellation_reason,
            created_at=booking.created_at,
            confirmed_at=booking.confirmed_at,
            cancelled_at=booking.cancelled_at,
            expired_at=booking.expired_at,
        )


class WebhookAckResponse(BaseModel):
    received: bool
