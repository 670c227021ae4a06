"""Unit tests for the Booking entity, Show and caller identity rules"""

from datetime import datetime, timedelta, timezone

import pytest

from src.platform.exception.exceptions import DomainError, ForbiddenError, ValidationError
from src.service.ticketing.domain.booking_error import InvalidBookingStateError
from src.service.ticketing.domain.entity.booking_entity import (
    BookedSeat,
    Booking,
    BookingStatus,
)
from src.service.ticketing.domain.entity.show_entity import Show
from src.service.ticketing.domain.entity.user_entity import UserEntity, UserRole
from src.service.ticketing.domain.value_object.seat_map import SeatMap, SeatTier


NOW = datetime(2025, 1, 10, 10, 0, tzinfo=timezone.utc)


def make_booking(**overrides) -> Booking:
    fields = dict(
        id='b1',
        show_id='show-1',
        user_id='user-x',
        seats=[
            BookedSeat(seat_code='A1', tier_name='Premium', price=350),
            BookedSeat(seat_code='B1', tier_name='Regular', price=200),
        ],
        hold_expires_at=NOW + timedelta(minutes=10),
        now=NOW,
        inr_to_usd_rate=0.012,
    )
    fields.update(overrides)
    return Booking.create(**fields)


class TestBookingCreate:
    def test_total_is_sum_of_seat_prices(self):
        booking = make_booking()

        assert booking.status == BookingStatus.PENDING
        assert booking.total_amount == 550
        assert booking.total_amount_usd == 6.6
        assert booking.seat_codes == ['A1', 'B1']
        assert booking.created_at == booking.updated_at == NOW

    def test_needs_seats(self):
        with pytest.raises(ValidationError):
            make_booking(seats=[])

    def test_rejects_duplicate_seats(self):
        seat = BookedSeat(seat_code='A1', tier_name='Premium', price=350)
        with pytest.raises(ValidationError):
            make_booking(seats=[seat, seat])


class TestBookingTransitions:
    def test_confirm_records_payment(self):
        later = NOW + timedelta(minutes=1)
        confirmed = make_booking().confirm(payment_ref='pay_1', now=later)

        assert confirmed.status == BookingStatus.CONFIRMED
        assert confirmed.payment_ref == 'pay_1'
        assert confirmed.confirmed_at == later

    def test_transitions_return_new_instances(self):
        booking = make_booking()
        booking.cancel(reason='changed my mind', now=NOW)

        assert booking.status == BookingStatus.PENDING

    @pytest.mark.parametrize('status', [BookingStatus.CANCELLED, BookingStatus.EXPIRED])
    def test_terminal_bookings_cannot_be_confirmed(self, status):
        booking = make_booking()
        booking.status = status

        with pytest.raises(InvalidBookingStateError) as exc_info:
            booking.confirm(payment_ref='pay_1', now=NOW)
        assert exc_info.value.status == status
        assert exc_info.value.status_code == 409

    def test_hold_expired_at_exact_deadline(self):
        booking = make_booking()

        assert not booking.is_hold_expired(NOW)
        assert booking.is_hold_expired(booking.hold_expires_at)


class TestShowAndUser:
    @pytest.fixture
    def show(self):
        return Show(
            id='show-1',
            movie_id='m',
            theatre_id='t',
            screen_id='s',
            starts_at=NOW + timedelta(hours=2),
            seat_map=SeatMap.from_tiers(
                [SeatTier(tier_name='Regular', price=200, rows=('A',), seats_per_row=2)]
            ),
        )

    def test_past_show_is_not_bookable(self, show):
        with pytest.raises(DomainError, match='past shows'):
            show.ensure_bookable(show.starts_at)

    def test_inactive_show_is_not_bookable(self, show):
        show.is_active = False
        with pytest.raises(DomainError, match='no longer available'):
            show.ensure_bookable(NOW)

    def test_role_check(self):
        customer = UserEntity(id='u1')

        with pytest.raises(ForbiddenError):
            customer.ensure_role(UserRole.MANAGER, UserRole.ADMIN)
        UserEntity(id='m1', role=UserRole.MANAGER).ensure_role(UserRole.MANAGER)

    def test_only_owner_or_admin_reads_a_booking(self):
        assert UserEntity(id='u1').can_access_booking_of('u1')
        assert not UserEntity(id='u2').can_access_booking_of('u1')
        assert UserEntity(id='a1', role=UserRole.ADMIN).can_access_booking_of('u1')
