"""
orjson payloads of the Booking and Show entities.

Datetimes travel as ISO-8601 strings; a show stores its tiers and the seat
map is rebuilt from them on load.
"""

from datetime import datetime
from typing import Any, Dict, Optional

import orjson

from src.service.ticketing.domain.entity.booking_entity import BookedSeat, Booking, BookingStatus
from src.service.ticketing.domain.entity.show_entity import Show
from src.service.ticketing.domain.value_object.seat_map import SeatMap, SeatTier


def _dt(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse_dt(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def booking_to_dict(booking: Booking) -> Dict[str, Any]:
    return {
        'id': booking.id,
        'show_id': booking.show_id,
        'user_id': booking.user_id,
        'seats': [
            {'seat_code': s.seat_code, 'tier_name': s.tier_name, 'price': s.price}
            for s in booking.seats
        ],
        'total_amount': booking.total_amount,
        'total_amount_usd': booking.total_amount_usd,
        'hold_expires_at': _dt(booking.hold_expires_at),
        'status': booking.status.value,
        'payment_ref': booking.payment_ref,
        'cancellation_reason': booking.cancellation_reason,
        'created_at': _dt(booking.created_at),
        'updated_at': _dt(booking.updated_at),
        'confirmed_at': _dt(booking.confirmed_at),
        'cancelled_at': _dt(booking.cancelled_at),
        'expired_at': _dt(booking.expired_at),
    }


def booking_from_dict(data: Dict[str, Any]) -> Booking:
    return Booking(
        id=data['id'],
        show_id=data['show_id'],
        user_id=data['user_id'],
        seats=[BookedSeat(**seat) for seat in data['seats']],
        total_amount=data['total_amount'],
        total_amount_usd=data['total_amount_usd'],
        hold_expires_at=datetime.fromisoformat(data['hold_expires_at']),
        status=BookingStatus(data['status']),
        payment_ref=data.get('payment_ref'),
        cancellation_reason=data.get('cancellation_reason'),
        created_at=_parse_dt(data.get('created_at')),
        updated_at=_parse_dt(data.get('updated_at')),
        confirmed_at=_parse_dt(data.get('confirmed_at')),
        cancelled_at=_parse_dt(data.get('cancelled_at')),
        expired_at=_parse_dt(data.get('expired_at')),
    )


def show_to_dict(show: Show) -> Dict[str, Any]:
    return {
        'id': show.id,
        'movie_id': show.movie_id,
        'theatre_id': show.theatre_id,
        'screen_id': show.screen_id,
        'starts_at': _dt(show.starts_at),
        'is_active': show.is_active,
        'created_at': _dt(show.created_at),
        'tiers': [
            {
                'tier_name': tier.tier_name,
                'price': tier.price,
                'rows': list(tier.rows),
                'seats_per_row': tier.seats_per_row,
            }
            for tier in show.seat_map.tiers
        ],
    }


def show_from_dict(data: Dict[str, Any]) -> Show:
    return Show(
        id=data['id'],
        movie_id=data['movie_id'],
        theatre_id=data['theatre_id'],
        screen_id=data['screen_id'],
        starts_at=datetime.fromisoformat(data['starts_at']),
        seat_map=SeatMap.from_tiers([SeatTier(**tier) for tier in data['tiers']]),
        is_active=data['is_active'],
        created_at=_parse_dt(data.get('created_at')),
    )


def dump_booking(booking: Booking) -> str:
    return orjson.dumps(booking_to_dict(booking)).decode()


def load_booking(raw: str | bytes) -> Booking:
    return booking_from_dict(orjson.loads(raw))


def dump_show(show: Show) -> str:
    return orjson.dumps(show_to_dict(show)).decode()


def load_show(raw: str | bytes) -> Show:
    return show_from_dict(orjson.loads(raw))
