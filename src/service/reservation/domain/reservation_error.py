from typing import Any, Iterable

from src.platform.exception.exceptions import ConflictError


class SeatsUnavailableError(ConflictError):
    """Some requested seats are booked or actively held by another holder."""

    def __init__(self, conflicting_seats: Iterable[str], message: str | None = None) -> None:
        self.conflicting_seats = sorted(set(conflicting_seats))
        super().__init__(
            message or f'Seats not available: {", ".join(self.conflicting_seats)}'
        )

    @property
    def extra(self) -> dict[str, Any]:
        return {'conflicting_seats': self.conflicting_seats}


class HoldError(ConflictError):
    """The caller's hold can no longer be honoured; a fresh hold is required."""

    reason: str = 'HoldError'

    def __init__(self, message: str, *, refund_required: bool = False) -> None:
        self.refund_required = refund_required
        super().__init__(message)

    def with_refund_required(self) -> 'HoldError':
        return type(self)(self.message, refund_required=True)

    @property
    def extra(self) -> dict[str, Any]:
        return {'reason': self.reason, 'refund_required': self.refund_required}


class HoldExpiredError(HoldError):
    reason = 'HoldExpired'


class HoldNotOwnedError(HoldError):
    reason = 'HoldNotOwned'
