from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import ForbiddenError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.reservation.app.interface.i_reservation_ledger import IReservationLedger
from src.service.shared_kernel.domain.clock import Clock
from src.service.ticketing.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.ticketing.app.interface.i_booking_query_repo import IBookingQueryRepo
from src.service.ticketing.app.interface.i_seat_availability_query_handler import (
    ISeatAvailabilityQueryHandler,
)
from src.service.ticketing.domain.booking_error import InvalidBookingStateError
from src.service.ticketing.domain.entity.booking_entity import Booking, BookingStatus


PAYMENT_FAILED_REASON = 'payment_failed'


class CancelBookingUseCase:
    """
    Cancel a PENDING booking and give its seats back.

    Flow:
    1. Validate booking exists, caller owns it and it is still PENDING
    2. Release the booking's held seats in the ledger
    3. If some seats were not released, ask the ledger whether they are
       BOOKED by this booking (confirm in flight) before cancelling
    4. Compare-and-set PENDING -> CANCELLED
    """

    def __init__(
        self,
        *,
        ledger: IReservationLedger,
        booking_command_repo: IBookingCommandRepo,
        booking_query_repo: IBookingQueryRepo,
        seat_availability_handler: ISeatAvailabilityQueryHandler,
        clock: Clock,
    ) -> None:
        self.ledger = ledger
        self.booking_command_repo = booking_command_repo
        self.booking_query_repo = booking_query_repo
        self.seat_availability_handler = seat_availability_handler
        self.clock = clock

    @classmethod
    @inject
    def depends(
        cls,
        ledger: IReservationLedger = Depends(Provide[Container.reservation_ledger]),
        booking_command_repo: IBookingCommandRepo = Depends(
            Provide[Container.booking_command_repo]
        ),
        booking_query_repo: IBookingQueryRepo = Depends(Provide[Container.booking_query_repo]),
        seat_availability_handler: ISeatAvailabilityQueryHandler = Depends(
            Provide[Container.seat_availability_query_handler]
        ),
        clock: Clock = Depends(Provide[Container.clock]),
    ) -> Self:
        return cls(
            ledger=ledger,
            booking_command_repo=booking_command_repo,
            booking_query_repo=booking_query_repo,
            seat_availability_handler=seat_availability_handler,
            clock=clock,
        )

    @Logger.io
    async def cancel(
        self, *, booking_id: str, reason: Optional[str] = None, user_id: Optional[str] = None
    ) -> Booking:
        booking = await self.booking_query_repo.get_by_id(booking_id=booking_id)
        if not booking:
            raise NotFoundError('Booking not found')
        if user_id is not None and booking.user_id != user_id:
            raise ForbiddenError('Only the booking owner can cancel this booking')
        if not booking.is_pending:
            raise InvalidBookingStateError(
                f'Cannot cancel a {booking.status} booking', status=booking.status
            )

        released = await self.ledger.release(
            show_id=booking.show_id, seat_codes=booking.seat_codes, holder_id=booking.id
        )
        if len(released) < len(booking.seat_codes):
            # Seats already reclaimed are fine; seats already booked are not
            result = await self.ledger.reclaim_hold(
                show_id=booking.show_id, seat_codes=booking.seat_codes, holder_id=booking.id
            )
            if result.booked:
                raise InvalidBookingStateError(
                    'Payment confirmation in progress', status=BookingStatus.PENDING
                )

        cancelled = booking.cancel(reason=reason, now=self.clock())
        if not await self.booking_command_repo.update_status(
            booking=cancelled, expected_status=BookingStatus.PENDING
        ):
            current = await self.booking_query_repo.get_by_id(booking_id=booking_id)
            status = current.status if current else booking.status
            raise InvalidBookingStateError(f'Cannot cancel a {status} booking', status=status)

        self.seat_availability_handler.invalidate(show_id=booking.show_id)
        metrics.record_cancellation(
            reason=PAYMENT_FAILED_REASON if reason == PAYMENT_FAILED_REASON else 'customer'
        )
        Logger.base.info(
            f'🚫 [CANCEL] booking={booking.id} released={released} reason={reason or "-"}'
        )
        return cancelled
