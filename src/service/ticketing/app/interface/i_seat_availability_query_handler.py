from abc import ABC, abstractmethod

from src.service.ticketing.app.dto.availability_snapshot import AvailabilitySnapshot


class ISeatAvailabilityQueryHandler(ABC):
    """Read side of the seat ledger. Advisory only; try_claim is authoritative."""

    @abstractmethod
    async def get_snapshot(self, *, show_id: str) -> AvailabilitySnapshot:
        pass

    @abstractmethod
    def invalidate(self, *, show_id: str) -> None:
        """Drop the cached snapshot after a local write."""
        pass
