from datetime import datetime
from typing import Optional

from opentelemetry import trace

from src.platform.config.core_setting import Settings
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.reservation.app.interface.i_reservation_ledger import IReservationLedger
from src.service.shared_kernel.domain.clock import Clock
from src.service.ticketing.app.dto.sweep_report import SweepReport
from src.service.ticketing.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.ticketing.app.interface.i_booking_notifier import (
    IBookingNotifier,
    notify_best_effort,
)
from src.service.ticketing.app.interface.i_booking_query_repo import IBookingQueryRepo
from src.service.ticketing.app.interface.i_seat_availability_query_handler import (
    ISeatAvailabilityQueryHandler,
)
from src.service.ticketing.domain.entity.booking_entity import Booking, BookingStatus


class BookingExpirer:
    """
    Moves a PENDING booking past its deadline to EXPIRED.

    The ledger decides: if any of the booking's seats is already BOOKED by it,
    a confirm won the race and the booking is left alone.
    """

    def __init__(
        self,
        *,
        ledger: IReservationLedger,
        booking_command_repo: IBookingCommandRepo,
        seat_availability_handler: ISeatAvailabilityQueryHandler,
        notifier: IBookingNotifier,
    ) -> None:
        self.ledger = ledger
        self.booking_command_repo = booking_command_repo
        self.seat_availability_handler = seat_availability_handler
        self.notifier = notifier

    async def reclaim_and_expire(
        self, *, booking: Booking, now: datetime, source: str
    ) -> Optional[Booking]:
        """
        Returns:
            The EXPIRED booking, or None when a confirm is in flight or another
            writer already moved the booking out of PENDING
        """
        result = await self.ledger.reclaim_hold(
            show_id=booking.show_id, seat_codes=booking.seat_codes, holder_id=booking.id
        )
        if result.booked:
            Logger.base.info(f'⏭️ [EXPIRY] booking={booking.id} already booked, confirm in flight')
            return None
        return await self.mark_expired(booking=booking, now=now, source=source)

    async def mark_expired(
        self, *, booking: Booking, now: datetime, source: str
    ) -> Optional[Booking]:
        """Status transition only; the caller has already dealt with the seats."""
        expired = booking.expire(now=now)
        if not await self.booking_command_repo.update_status(
            booking=expired, expected_status=BookingStatus.PENDING
        ):
            return None

        self.seat_availability_handler.invalidate(show_id=booking.show_id)
        metrics.record_expiration(source=source)
        Logger.base.info(f'⌛ [EXPIRY] booking={booking.id} expired ({source})')
        await notify_best_effort(self.notifier, booking=expired)
        return expired


class ExpireStaleHoldsUseCase:
    """
    One sweeper tick.

    Step 1 frees every past-deadline hold show by show and expires the
    bookings that owned them. Step 2 catches PENDING bookings whose seats were
    already taken over lazily by another customer's claim, so step 1 never
    saw them.
    """

    def __init__(
        self,
        *,
        ledger: IReservationLedger,
        booking_query_repo: IBookingQueryRepo,
        expirer: BookingExpirer,
        settings: Settings,
        clock: Clock,
    ) -> None:
        self.ledger = ledger
        self.booking_query_repo = booking_query_repo
        self.expirer = expirer
        self.settings = settings
        self.clock = clock
        self.tracer = trace.get_tracer(__name__)

    @Logger.io
    async def run(self) -> SweepReport:
        report = SweepReport()
        with self.tracer.start_as_current_span('use_case.expire_stale_holds'):
            await self._sweep_ledger(report)
            await self._expire_overdue_bookings(report)

        if report.expired_booking_ids or report.released_seats:
            Logger.base.info(
                f'🧹 [SWEEP] shows={report.shows_swept} released_seats={report.released_seats} '
                f'expired={len(report.expired_booking_ids)} '
                f'skipped={len(report.skipped_booking_ids)}'
            )
        return report

    async def _sweep_ledger(self, report: SweepReport) -> None:
        for show_id in await self.ledger.list_show_ids():
            reclaimed = await self.ledger.sweep_expired(show_id=show_id)
            report.shows_swept += 1
            if not reclaimed:
                continue

            report.released_seats += sum(len(seats) for seats in reclaimed.values())
            self.expirer.seat_availability_handler.invalidate(show_id=show_id)
            for holder_id in reclaimed:
                # holder_id is the owning booking's id
                booking = await self.booking_query_repo.get_by_id(booking_id=holder_id)
                if not booking or not booking.is_pending:
                    continue
                expired = await self.expirer.mark_expired(
                    booking=booking, now=self.clock(), source='sweeper'
                )
                if expired:
                    report.expired_booking_ids.append(expired.id)

    async def _expire_overdue_bookings(self, report: SweepReport) -> None:
        overdue = await self.booking_query_repo.list_pending_past_deadline(
            now=self.clock(), limit=self.settings.SWEEP_BATCH_SIZE
        )
        for booking in overdue:
            if booking.id in report.expired_booking_ids:
                continue
            expired = await self.expirer.reclaim_and_expire(
                booking=booking, now=self.clock(), source='sweeper'
            )
            if expired:
                report.expired_booking_ids.append(expired.id)
            else:
                report.skipped_booking_ids.append(booking.id)
