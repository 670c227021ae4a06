"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.ticketing.app.command import (
    cancel_booking_use_case,
    confirm_payment_use_case,
    create_hold_use_case,
    register_show_use_case,
)
from src.service.ticketing.app.query import (
    get_booking_use_case,
    get_seat_availability_use_case,
    get_show_layout_use_case,
    list_bookings_use_case,
)
from src.service.ticketing.driving_adapter.http_controller.auth import role_auth


WIRE_MODULES: list[ModuleType] = [
    create_hold_use_case,
    confirm_payment_use_case,
    cancel_booking_use_case,
    register_show_use_case,
    get_booking_use_case,
    list_bookings_use_case,
    get_seat_availability_use_case,
    get_show_layout_use_case,
    role_auth,
]
