"""Ticketing Domain Value Objects"""

from src.service.ticketing.domain.value_object.seat_map import Seat, SeatMap, SeatTier

__all__ = ['Seat', 'SeatMap', 'SeatTier']
