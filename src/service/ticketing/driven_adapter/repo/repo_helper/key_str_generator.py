"""
Key String Generator

Kvrocks keys of the booking and show repositories.
"""

from src.platform.config.core_setting import settings


def _make_key(key: str) -> str:
    """Add prefix to key for test isolation in parallel testing"""
    return f'{settings.KVROCKS_KEY_PREFIX}{key}'


def make_booking_key(*, booking_id: str) -> str:
    """Hash: status + orjson payload"""
    return _make_key(f'booking:{booking_id}')


def make_user_bookings_key(*, user_id: str) -> str:
    """Sorted set: booking_id scored by created_at (epoch ms)"""
    return _make_key(f'user_bookings:{user_id}')


def make_pending_deadline_key() -> str:
    """Sorted set: PENDING booking_id scored by hold_expires_at (epoch ms)"""
    return _make_key('booking_pending_deadline')


def make_show_key(*, show_id: str) -> str:
    """String: orjson show payload, written once"""
    return _make_key(f'show:{show_id}')
