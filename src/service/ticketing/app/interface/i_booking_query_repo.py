from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from src.service.ticketing.domain.entity.booking_entity import Booking, BookingStatus


class IBookingQueryRepo(ABC):
    """Repository interface for booking read operations"""

    @abstractmethod
    async def get_by_id(self, *, booking_id: str) -> Optional[Booking]:
        pass

    @abstractmethod
    async def list_by_user(
        self, *, user_id: str, status: Optional[BookingStatus] = None
    ) -> List[Booking]:
        """Newest first"""
        pass

    @abstractmethod
    async def list_pending_past_deadline(self, *, now: datetime, limit: int) -> List[Booking]:
        """PENDING bookings whose hold_expires_at <= now, oldest deadline first"""
        pass
