"""Application layer interfaces (Ports)"""

from src.service.ticketing.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.ticketing.app.interface.i_booking_notifier import IBookingNotifier
from src.service.ticketing.app.interface.i_booking_query_repo import IBookingQueryRepo
from src.service.ticketing.app.interface.i_seat_availability_query_handler import (
    ISeatAvailabilityQueryHandler,
)
from src.service.ticketing.app.interface.i_show_command_repo import IShowCommandRepo
from src.service.ticketing.app.interface.i_show_query_repo import IShowQueryRepo

__all__ = [
    'IBookingCommandRepo',
    'IBookingNotifier',
    'IBookingQueryRepo',
    'ISeatAvailabilityQueryHandler',
    'IShowCommandRepo',
    'IShowQueryRepo',
]
