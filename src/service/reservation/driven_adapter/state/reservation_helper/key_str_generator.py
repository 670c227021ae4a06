"""
Key String Generator

Kvrocks keys of the reservation ledger. Per-show keys share the ``{show_id}``
hash tag so a ledger script touching both lands on one cluster slot.
"""

from src.platform.config.core_setting import settings


def _make_key(key: str) -> str:
    """Add prefix to key for test isolation in parallel testing"""
    return f'{settings.KVROCKS_KEY_PREFIX}{key}'


def make_seat_state_key(*, show_id: str) -> str:
    """Hash: seat_code -> encoded SeatRecord"""
    return _make_key(f'seat_state:{{{show_id}}}')


def make_hold_expiry_key(*, show_id: str) -> str:
    """Sorted set: seat_code scored by hold deadline (epoch ms)"""
    return _make_key(f'seat_hold_expiry:{{{show_id}}}')


def make_ledger_shows_key() -> str:
    """Set of show ids that have ledger records"""
    return _make_key('ledger_shows')
