from typing import List

import attrs


@attrs.define
class SweepReport:
    """Outcome of one sweeper tick."""

    shows_swept: int = 0
    released_seats: int = 0
    expired_booking_ids: List[str] = attrs.field(factory=list)
    skipped_booking_ids: List[str] = attrs.field(factory=list)  # confirm in flight
