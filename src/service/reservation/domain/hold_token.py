from datetime import datetime

import attrs


@attrs.frozen
class HoldToken:
    """Proof of a successful all-or-nothing claim."""

    show_id: str
    holder_id: str
    seat_codes: tuple[str, ...]  # sorted
    expires_at: datetime


@attrs.frozen
class ReclaimResult:
    released_seats: tuple[str, ...] = ()
    booked: bool = False  # at least one seat already BOOKED by the holder
