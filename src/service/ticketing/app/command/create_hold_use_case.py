from datetime import timedelta
from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
import uuid_utils

from src.platform.config.core_setting import Settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError, ValidationError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.reservation.app.interface.i_reservation_ledger import IReservationLedger
from src.service.reservation.domain.reservation_error import SeatsUnavailableError
from src.service.shared_kernel.domain.clock import Clock
from src.service.ticketing.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.ticketing.app.interface.i_seat_availability_query_handler import (
    ISeatAvailabilityQueryHandler,
)
from src.service.ticketing.app.interface.i_show_query_repo import IShowQueryRepo
from src.service.ticketing.domain.booking_error import SeatConflictError
from src.service.ticketing.domain.entity.booking_entity import BookedSeat, Booking
from src.service.ticketing.domain.value_object.seat_code import normalize_seat_selection


class CreateHoldUseCase:
    """
    Hold seats for a customer and open a PENDING booking.

    Flow:
    1. Normalize the seat selection (fail fast, no state touched)
    2. Load the show and check it is still bookable
    3. Price every seat from the layout
    4. Claim all seats in the ledger with holder_id = booking_id
    5. Persist the PENDING booking; release the claim if that write fails
    """

    def __init__(
        self,
        *,
        ledger: IReservationLedger,
        show_query_repo: IShowQueryRepo,
        booking_command_repo: IBookingCommandRepo,
        seat_availability_handler: ISeatAvailabilityQueryHandler,
        settings: Settings,
        clock: Clock,
    ) -> None:
        self.ledger = ledger
        self.show_query_repo = show_query_repo
        self.booking_command_repo = booking_command_repo
        self.seat_availability_handler = seat_availability_handler
        self.settings = settings
        self.clock = clock
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        ledger: IReservationLedger = Depends(Provide[Container.reservation_ledger]),
        show_query_repo: IShowQueryRepo = Depends(Provide[Container.show_query_repo]),
        booking_command_repo: IBookingCommandRepo = Depends(
            Provide[Container.booking_command_repo]
        ),
        seat_availability_handler: ISeatAvailabilityQueryHandler = Depends(
            Provide[Container.seat_availability_query_handler]
        ),
        settings: Settings = Depends(Provide[Container.config_service]),
        clock: Clock = Depends(Provide[Container.clock]),
    ) -> Self:
        return cls(
            ledger=ledger,
            show_query_repo=show_query_repo,
            booking_command_repo=booking_command_repo,
            seat_availability_handler=seat_availability_handler,
            settings=settings,
            clock=clock,
        )

    @Logger.io
    async def create_hold(self, *, show_id: str, user_id: str, seat_codes: List[str]) -> Booking:
        codes = normalize_seat_selection(seat_codes, max_seats=self.settings.MAX_SEATS_PER_BOOKING)
        booking_id = str(uuid_utils.uuid7())

        with self.tracer.start_as_current_span(
            'use_case.create_hold',
            attributes={'booking.id': booking_id, 'show.id': show_id, 'seat.count': len(codes)},
        ):
            show = await self.show_query_repo.get_show(show_id=show_id)
            if not show:
                raise NotFoundError('Show not found')
            show.ensure_bookable(self.clock())

            unknown = show.seat_map.unknown_seats(codes)
            if unknown:
                raise ValidationError(f'Unknown seats for this show: {", ".join(unknown)}')

            booked_seats = []
            for code in codes:
                seat = show.seat_map.seats[code]
                booked_seats.append(
                    BookedSeat(seat_code=code, tier_name=seat.tier_name, price=seat.price)
                )

            try:
                hold = await self.ledger.try_claim(
                    show_id=show_id,
                    seat_codes=codes,
                    holder_id=booking_id,
                    ttl=timedelta(seconds=self.settings.HOLD_TTL_SECONDS),
                )
            except SeatsUnavailableError as e:
                metrics.record_hold(result='conflict', seat_count=len(codes))
                raise SeatConflictError(e.conflicting_seats) from e

            booking = Booking.create(
                id=booking_id,
                show_id=show_id,
                user_id=user_id,
                seats=booked_seats,
                hold_expires_at=hold.expires_at,
                now=self.clock(),
                inr_to_usd_rate=self.settings.INR_TO_USD_RATE,
            )

            try:
                booking = await self.booking_command_repo.create(booking=booking)
            except Exception:
                # The hold must not outlive a booking that was never stored
                released = await self.ledger.release(
                    show_id=show_id, seat_codes=codes, holder_id=booking_id
                )
                Logger.base.warning(
                    f'↩️ [CREATE-HOLD] Booking {booking_id} not persisted, released {released}'
                )
                raise

            self.seat_availability_handler.invalidate(show_id=show_id)
            metrics.record_hold(result='granted', seat_count=len(codes))
            Logger.base.info(
                f'🎟️ [CREATE-HOLD] booking={booking_id} user={user_id} show={show_id} '
                f'seats={codes} until {hold.expires_at.isoformat()}'
            )
            return booking
