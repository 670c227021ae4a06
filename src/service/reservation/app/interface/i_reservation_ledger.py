"""
Reservation Ledger Interface

Single source of truth for per-seat state. Every multi-seat operation
evaluates seats in lexicographic seat-code order and applies its transition
atomically; implementations never perform I/O while holding seat locks.
"""

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Dict, Iterable, List

from src.service.reservation.domain.hold_token import HoldToken, ReclaimResult
from src.service.reservation.domain.seat_record import SeatStatus


class IReservationLedger(ABC):
    @abstractmethod
    async def initialize_show(self, *, show_id: str, seat_codes: Iterable[str]) -> None:
        """Create FREE records for seats that have none (idempotent)."""
        pass

    @abstractmethod
    async def try_claim(
        self, *, show_id: str, seat_codes: Iterable[str], holder_id: str, ttl: timedelta
    ) -> HoldToken:
        """
        Move every seat to HELD(holder_id, now + ttl), or none of them.

        Seats already actively held by the same holder are accepted as-is.

        Raises:
            SeatsUnavailableError: with exactly the seats BOOKED or actively
                HELD by someone else
        """
        pass

    @abstractmethod
    async def confirm(
        self, *, show_id: str, seat_codes: Iterable[str], holder_id: str, booking_id: str
    ) -> None:
        """
        HELD(holder_id) -> BOOKED(booking_id) for every seat, atomically.

        Seats already BOOKED by booking_id make the call an idempotent success.

        Raises:
            HoldNotOwnedError: a seat is held or booked by another party
            HoldExpiredError: a seat's deadline has passed or it was reclaimed
        """
        pass

    @abstractmethod
    async def release(
        self, *, show_id: str, seat_codes: Iterable[str], holder_id: str
    ) -> List[str]:
        """HELD(holder_id) -> FREE; returns the seats released. Never raises on no-ops."""
        pass

    @abstractmethod
    async def list_state(self, *, show_id: str) -> Dict[str, SeatStatus]:
        """Snapshot of every known seat; expired holds read as FREE."""
        pass

    @abstractmethod
    async def sweep_expired(self, *, show_id: str) -> Dict[str, List[str]]:
        """Free every expired hold of the show; returns {holder_id: [seat_codes]}."""
        pass

    @abstractmethod
    async def reclaim_hold(
        self, *, show_id: str, seat_codes: Iterable[str], holder_id: str
    ) -> ReclaimResult:
        """Free the holder's expired holds among seat_codes and report BOOKED ones."""
        pass

    @abstractmethod
    async def list_show_ids(self) -> List[str]:
        pass
