from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.exception.exceptions import ForbiddenError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.reservation.app.interface.i_reservation_ledger import IReservationLedger
from src.service.reservation.domain.reservation_error import HoldError, HoldExpiredError
from src.service.shared_kernel.domain.clock import Clock
from src.service.ticketing.app.command.expire_stale_holds_use_case import BookingExpirer
from src.service.ticketing.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.ticketing.app.interface.i_booking_notifier import (
    IBookingNotifier,
    notify_best_effort,
)
from src.service.ticketing.app.interface.i_booking_query_repo import IBookingQueryRepo
from src.service.ticketing.app.interface.i_seat_availability_query_handler import (
    ISeatAvailabilityQueryHandler,
)
from src.service.ticketing.domain.booking_error import InvalidBookingStateError
from src.service.ticketing.domain.entity.booking_entity import Booking, BookingStatus


class ConfirmPaymentUseCase:
    """
    Turn a paid PENDING booking into CONFIRMED.

    The ledger confirm is the only thing that can book seats, and it refuses
    once the hold deadline has passed whether or not the sweeper has run.
    Every refusal after payment carries refund_required=True.
    """

    def __init__(
        self,
        *,
        ledger: IReservationLedger,
        booking_command_repo: IBookingCommandRepo,
        booking_query_repo: IBookingQueryRepo,
        seat_availability_handler: ISeatAvailabilityQueryHandler,
        notifier: IBookingNotifier,
        expirer: BookingExpirer,
        clock: Clock,
    ) -> None:
        self.ledger = ledger
        self.booking_command_repo = booking_command_repo
        self.booking_query_repo = booking_query_repo
        self.seat_availability_handler = seat_availability_handler
        self.notifier = notifier
        self.expirer = expirer
        self.clock = clock
        self.tracer = trace.get_tracer(__name__)

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
        notifier: IBookingNotifier = Depends(Provide[Container.booking_notifier]),
        expirer: BookingExpirer = Depends(Provide[Container.booking_expirer]),
        clock: Clock = Depends(Provide[Container.clock]),
    ) -> Self:
        return cls(
            ledger=ledger,
            booking_command_repo=booking_command_repo,
            booking_query_repo=booking_query_repo,
            seat_availability_handler=seat_availability_handler,
            notifier=notifier,
            expirer=expirer,
            clock=clock,
        )

    @Logger.io
    async def confirm_payment(
        self, *, booking_id: str, payment_ref: str, user_id: Optional[str] = None
    ) -> Booking:
        with self.tracer.start_as_current_span(
            'use_case.confirm_payment', attributes={'booking.id': booking_id}
        ):
            booking = await self.booking_query_repo.get_by_id(booking_id=booking_id)
            if not booking:
                raise NotFoundError('Booking not found')
            if user_id is not None and booking.user_id != user_id:
                raise ForbiddenError('Access denied')

            if not booking.is_pending:
                return self._resolve_terminal(booking, payment_ref=payment_ref)

            now = self.clock()
            if booking.is_hold_expired(now):
                expired = await self.expirer.reclaim_and_expire(
                    booking=booking, now=now, source='confirm'
                )
                if not expired:
                    return await self._reread_after_race(booking_id, payment_ref=payment_ref)
                metrics.record_confirmation(result=HoldExpiredError.reason)
                raise HoldExpiredError(
                    'Hold expired before payment was confirmed', refund_required=True
                )

            try:
                await self.ledger.confirm(
                    show_id=booking.show_id,
                    seat_codes=booking.seat_codes,
                    holder_id=booking.id,
                    booking_id=booking.id,
                )
            except HoldError as e:
                # Some seats are gone (reclaimed or taken over); give back the rest
                await self.ledger.release(
                    show_id=booking.show_id, seat_codes=booking.seat_codes, holder_id=booking.id
                )
                await self.expirer.mark_expired(booking=booking, now=now, source='confirm')
                metrics.record_confirmation(result=e.reason)
                raise e.with_refund_required() from e

            confirmed = booking.confirm(payment_ref=payment_ref, now=self.clock())
            if not await self.booking_command_repo.update_status(
                booking=confirmed, expected_status=BookingStatus.PENDING
            ):
                return await self._reread_after_race(booking_id, payment_ref=payment_ref)

            self.seat_availability_handler.invalidate(show_id=booking.show_id)
            metrics.record_confirmation(result='confirmed')
            Logger.base.info(
                f'✅ [CONFIRM] booking={booking.id} seats={booking.seat_codes} '
                f'payment_ref={payment_ref}'
            )
            await notify_best_effort(self.notifier, booking=confirmed)
            return confirmed

    def _resolve_terminal(self, booking: Booking, *, payment_ref: str) -> Booking:
        if booking.status == BookingStatus.CONFIRMED:
            if booking.payment_ref == payment_ref:
                # Duplicate gateway callback
                metrics.record_confirmation(result='duplicate')
                return booking
            raise InvalidBookingStateError(
                'Booking already confirmed with a different payment', status=booking.status
            )
        if booking.status == BookingStatus.EXPIRED:
            metrics.record_confirmation(result=HoldExpiredError.reason)
            raise HoldExpiredError('Booking hold has expired', refund_required=True)
        raise InvalidBookingStateError(
            f'Cannot confirm a {booking.status} booking', status=booking.status
        )

    async def _reread_after_race(self, booking_id: str, *, payment_ref: str) -> Booking:
        current = await self.booking_query_repo.get_by_id(booking_id=booking_id)
        if current and not current.is_pending:
            return self._resolve_terminal(current, payment_ref=payment_ref)
        raise InvalidBookingStateError(
            'Payment confirmation in progress', status=BookingStatus.PENDING
        )
