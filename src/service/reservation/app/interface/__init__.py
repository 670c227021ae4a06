"""Reservation Service Interfaces"""

from src.service.reservation.app.interface.i_reservation_ledger import IReservationLedger

__all__ = ['IReservationLedger']
