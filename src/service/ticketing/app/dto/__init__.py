"""Application layer DTOs"""

from src.service.ticketing.app.dto.availability_snapshot import AvailabilitySnapshot
from src.service.ticketing.app.dto.sweep_report import SweepReport

__all__ = ['AvailabilitySnapshot', 'SweepReport']
