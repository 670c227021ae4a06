"""
Unit tests for ExpireStaleHoldsUseCase and BookingExpirer

Focus:
1. Expired holds return to FREE and their bookings become EXPIRED
2. Holds lazily taken over by another claim still expire their old booking
3. A booking whose seats are already BOOKED (confirm in flight) is skipped
4. Running the sweep twice changes nothing the second time
"""

from src.service.reservation.domain.seat_record import SeatStatus
from src.service.ticketing.domain.entity.booking_entity import BookingStatus


class TestExpireStaleHolds:
    async def test_nothing_to_do_before_deadline(
        self, expire_stale_holds_use_case, create_hold_use_case, show, fake_clock
    ):
        await create_hold_use_case.create_hold(
            show_id=show.id, user_id='user-x', seat_codes=['A1']
        )
        fake_clock.advance(299)

        report = await expire_stale_holds_use_case.run()

        assert report.shows_swept == 1
        assert report.released_seats == 0
        assert report.expired_booking_ids == []

    async def test_expires_bookings_and_frees_seats(
        self,
        expire_stale_holds_use_case,
        create_hold_use_case,
        show,
        ledger,
        booking_query_repo,
        notifier,
        fake_clock,
    ):
        booking = await create_hold_use_case.create_hold(
            show_id=show.id, user_id='user-x', seat_codes=['A1', 'A2']
        )
        fake_clock.advance(300)

        report = await expire_stale_holds_use_case.run()

        assert report.released_seats == 2
        assert report.expired_booking_ids == [booking.id]
        stored = await booking_query_repo.get_by_id(booking_id=booking.id)
        assert stored.status == BookingStatus.EXPIRED
        assert stored.expired_at == fake_clock()
        record = await ledger.get_record(show_id=show.id, seat_code='A1')
        assert record.status == SeatStatus.FREE
        assert notifier.sent[-1]['subject'] == f'Booking Expired - #{booking.id}'

    async def test_second_run_is_a_noop(
        self, expire_stale_holds_use_case, create_hold_use_case, show, notifier, fake_clock
    ):
        await create_hold_use_case.create_hold(
            show_id=show.id, user_id='user-x', seat_codes=['A1']
        )
        fake_clock.advance(301)
        await expire_stale_holds_use_case.run()

        report = await expire_stale_holds_use_case.run()

        assert report.released_seats == 0
        assert report.expired_booking_ids == []
        assert len(notifier.sent) == 1

    async def test_hold_taken_over_before_sweep_still_expires(
        self,
        expire_stale_holds_use_case,
        create_hold_use_case,
        show,
        ledger,
        booking_query_repo,
        fake_clock,
    ):
        stale = await create_hold_use_case.create_hold(
            show_id=show.id, user_id='user-x', seat_codes=['A1']
        )
        fake_clock.advance(301)
        fresh = await create_hold_use_case.create_hold(
            show_id=show.id, user_id='user-y', seat_codes=['A1']
        )

        report = await expire_stale_holds_use_case.run()

        assert report.expired_booking_ids == [stale.id]
        assert (await booking_query_repo.get_by_id(booking_id=stale.id)).status == (
            BookingStatus.EXPIRED
        )
        assert (await booking_query_repo.get_by_id(booking_id=fresh.id)).is_pending
        record = await ledger.get_record(show_id=show.id, seat_code='A1')
        assert record.holder_id == fresh.id

    async def test_skips_booking_whose_seats_are_booked(
        self,
        expire_stale_holds_use_case,
        create_hold_use_case,
        show,
        ledger,
        booking_query_repo,
        fake_clock,
    ):
        booking = await create_hold_use_case.create_hold(
            show_id=show.id, user_id='user-x', seat_codes=['A1']
        )
        # Ledger confirm landed just before the deadline; the status write has not
        await ledger.confirm(
            show_id=show.id, seat_codes=['A1'], holder_id=booking.id, booking_id=booking.id
        )
        fake_clock.advance(301)

        report = await expire_stale_holds_use_case.run()

        assert report.skipped_booking_ids == [booking.id]
        assert (await booking_query_repo.get_by_id(booking_id=booking.id)).is_pending
        record = await ledger.get_record(show_id=show.id, seat_code='A1')
        assert record.status == SeatStatus.BOOKED

    async def test_confirmed_bookings_are_untouched(
        self,
        expire_stale_holds_use_case,
        create_hold_use_case,
        confirm_payment_use_case,
        show,
        booking_query_repo,
        fake_clock,
    ):
        booking = await create_hold_use_case.create_hold(
            show_id=show.id, user_id='user-x', seat_codes=['A1']
        )
        await confirm_payment_use_case.confirm_payment(booking_id=booking.id, payment_ref='p')
        fake_clock.advance(3600)

        report = await expire_stale_holds_use_case.run()

        assert report.expired_booking_ids == []
        stored = await booking_query_repo.get_by_id(booking_id=booking.id)
        assert stored.status == BookingStatus.CONFIRMED


class TestBookingExpirer:
    async def test_mark_expired_loses_to_another_writer(
        self, expirer, create_hold_use_case, cancel_booking_use_case, show, fake_clock
    ):
        booking = await create_hold_use_case.create_hold(
            show_id=show.id, user_id='user-x', seat_codes=['C1']
        )
        await cancel_booking_use_case.cancel(booking_id=booking.id)

        result = await expirer.mark_expired(booking=booking, now=fake_clock(), source='sweeper')

        assert result is None
