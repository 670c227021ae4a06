"""Unit tests for show registration and the read side (layout, availability, bookings)"""

import pytest

from src.platform.exception.exceptions import ConflictError, ForbiddenError, NotFoundError
from src.service.reservation.domain.seat_record import SeatStatus
from src.service.ticketing.app.query.get_booking_use_case import GetBookingUseCase
from src.service.ticketing.app.query.get_seat_availability_use_case import (
    GetSeatAvailabilityUseCase,
)
from src.service.ticketing.app.query.get_show_layout_use_case import GetShowLayoutUseCase
from src.service.ticketing.app.query.list_bookings_use_case import ListBookingsUseCase
from src.service.ticketing.domain.entity.booking_entity import BookingStatus
from src.service.ticketing.domain.entity.show_entity import Show
from src.service.ticketing.domain.entity.user_entity import UserEntity, UserRole
from test.helpers import SHOW_STARTS_AT, default_tiers


class TestRegisterShow:
    async def test_creates_free_ledger_records(self, show, ledger):
        state = await ledger.list_state(show_id=show.id)

        assert len(state) == 9
        assert set(state.values()) == {SeatStatus.FREE}

    async def test_duplicate_show_id_is_a_conflict(self, register_show_use_case, show):
        with pytest.raises(ConflictError):
            await register_show_use_case.register_show(
                movie_id='m',
                theatre_id='t',
                screen_id='s',
                starts_at=SHOW_STARTS_AT,
                tiers=default_tiers(),
                show_id=show.id,
            )

    async def test_generates_id_when_missing(self, register_show_use_case, fake_clock):
        show = await register_show_use_case.register_show(
            movie_id='m',
            theatre_id='t',
            screen_id='s',
            starts_at=SHOW_STARTS_AT,
            tiers=default_tiers(),
        )

        assert show.id
        assert show.created_at == fake_clock()


class TestShowLayout:
    async def test_returns_registered_show(self, show_repo, show):
        use_case = GetShowLayoutUseCase(show_query_repo=show_repo)

        assert await use_case.get_show(show_id=show.id) == show

    async def test_unknown_show(self, show_repo):
        with pytest.raises(NotFoundError):
            await GetShowLayoutUseCase(show_query_repo=show_repo).get_show(show_id='nope')


class TestSeatAvailability:
    @pytest.fixture
    def use_case(self, show_repo, availability_handler):
        return GetSeatAvailabilityUseCase(
            show_query_repo=show_repo, seat_availability_handler=availability_handler
        )

    async def test_reflects_holds(self, use_case, create_hold_use_case, show):
        await create_hold_use_case.create_hold(
            show_id=show.id, user_id='user-x', seat_codes=['A1', 'B2']
        )

        snapshot = await use_case.get_availability(show_id=show.id)

        assert snapshot.seats['A1'] == SeatStatus.HELD
        assert snapshot.seats['B2'] == SeatStatus.HELD
        assert snapshot.counts == {'free': 7, 'held': 2, 'booked': 0}

    async def test_seats_without_records_read_as_free(self, use_case, show_repo, show):
        """A show stored without ledger initialisation still shows every seat"""
        other = Show(
            id='no-ledger',
            movie_id=show.movie_id,
            theatre_id=show.theatre_id,
            screen_id=show.screen_id,
            starts_at=show.starts_at,
            seat_map=show.seat_map,
        )
        await show_repo.create(show=other)

        snapshot = await use_case.get_availability(show_id='no-ledger')

        assert set(snapshot.seats) == set(show.seat_map.seat_codes)
        assert set(snapshot.seats.values()) == {SeatStatus.FREE}

    async def test_unknown_show(self, use_case):
        with pytest.raises(NotFoundError):
            await use_case.get_availability(show_id='nope')


class TestBookingQueries:
    async def test_owner_and_admin_can_read(
        self, booking_query_repo, create_hold_use_case, show
    ):
        booking = await create_hold_use_case.create_hold(
            show_id=show.id, user_id='user-x', seat_codes=['C1']
        )
        use_case = GetBookingUseCase(booking_query_repo=booking_query_repo)

        owner = UserEntity(id='user-x')
        admin = UserEntity(id='root', role=UserRole.ADMIN)
        assert (await use_case.get_booking(booking_id=booking.id, current_user=owner)) == booking
        assert (await use_case.get_booking(booking_id=booking.id, current_user=admin)) == booking

        with pytest.raises(ForbiddenError):
            await use_case.get_booking(
                booking_id=booking.id, current_user=UserEntity(id='user-y')
            )

    async def test_unknown_booking(self, booking_query_repo):
        with pytest.raises(NotFoundError):
            await GetBookingUseCase(booking_query_repo=booking_query_repo).get_booking(
                booking_id='nope', current_user=UserEntity(id='user-x')
            )

    async def test_list_is_newest_first_and_filterable(
        self,
        booking_query_repo,
        create_hold_use_case,
        cancel_booking_use_case,
        show,
        fake_clock,
    ):
        first = await create_hold_use_case.create_hold(
            show_id=show.id, user_id='user-x', seat_codes=['A1']
        )
        fake_clock.advance(10)
        second = await create_hold_use_case.create_hold(
            show_id=show.id, user_id='user-x', seat_codes=['A2']
        )
        await create_hold_use_case.create_hold(
            show_id=show.id, user_id='user-y', seat_codes=['A3']
        )
        await cancel_booking_use_case.cancel(booking_id=first.id)
        use_case = ListBookingsUseCase(booking_query_repo=booking_query_repo)

        everything = await use_case.list_user_bookings(user_id='user-x')
        cancelled = await use_case.list_user_bookings(
            user_id='user-x', status=BookingStatus.CANCELLED
        )

        assert [b.id for b in everything] == [second.id, first.id]
        assert [b.id for b in cancelled] == [first.id]
