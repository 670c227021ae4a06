"""
Wire format of a SeatRecord inside the ledger hash.

    F                       FREE
    H|<holder_id>|<ms>      HELD until epoch milliseconds
    B|<booking_id>          BOOKED

The Lua scripts parse the same format; keep both sides in sync.
"""

from datetime import datetime, timezone

from src.service.reservation.domain.seat_record import SeatRecord, SeatStatus


FREE_TOKEN = 'F'
HELD_PREFIX = 'H'
BOOKED_PREFIX = 'B'
SEPARATOR = '|'


def to_epoch_ms(moment: datetime) -> int:
    return round(moment.timestamp() * 1000)


def from_epoch_ms(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


def encode_seat_record(record: SeatRecord) -> str:
    if record.status == SeatStatus.HELD:
        if record.holder_id is None or record.expires_at is None:
            raise ValueError(f'HELD record needs holder_id and expires_at: {record!r}')
        expires_ms = to_epoch_ms(record.expires_at)
        return SEPARATOR.join((HELD_PREFIX, record.holder_id, str(expires_ms)))
    if record.status == SeatStatus.BOOKED:
        if record.booking_id is None:
            raise ValueError(f'BOOKED record needs booking_id: {record!r}')
        return SEPARATOR.join((BOOKED_PREFIX, record.booking_id))
    return FREE_TOKEN


def decode_seat_record(raw: str | bytes | None) -> SeatRecord:
    """Missing values decode as FREE (records are created lazily)."""
    if raw is None:
        return SeatRecord.free()
    if isinstance(raw, bytes):
        raw = raw.decode()

    kind, *parts = raw.split(SEPARATOR)
    if kind == FREE_TOKEN and not parts:
        return SeatRecord.free()
    if kind == HELD_PREFIX and len(parts) == 2:
        return SeatRecord.held(holder_id=parts[0], expires_at=from_epoch_ms(int(parts[1])))
    if kind == BOOKED_PREFIX and len(parts) == 1:
        return SeatRecord.booked(booking_id=parts[0])
    raise ValueError(f'Malformed seat record: {raw!r}')
