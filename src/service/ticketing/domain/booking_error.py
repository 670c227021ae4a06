from typing import Any, Iterable

from src.platform.exception.exceptions import ConflictError
from src.service.reservation.domain.reservation_error import SeatsUnavailableError


class SeatConflictError(SeatsUnavailableError):
    """Hold rejected; the client should re-read availability and pick again."""

    def __init__(self, conflicting_seats: Iterable[str]) -> None:
        seats = sorted(set(conflicting_seats))
        super().__init__(seats, f'Seats already taken: {", ".join(seats)}')


class InvalidBookingStateError(ConflictError):
    def __init__(self, message: str, *, status: str) -> None:
        self.status = status
        super().__init__(message)

    @property
    def extra(self) -> dict[str, Any]:
        return {'status': self.status}
