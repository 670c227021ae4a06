"""Unit tests for seat codes and the per-show seat map"""

import pytest

from src.platform.exception.exceptions import DomainError, ValidationError
from src.service.ticketing.domain.value_object.seat_code import (
    normalize_seat_selection,
    split_seat_code,
)
from src.service.ticketing.domain.value_object.seat_map import SeatMap, SeatTier


class TestSeatCode:
    def test_split_multi_letter_row(self):
        assert split_seat_code('AB12') == ('AB', 12)

    @pytest.mark.parametrize('code', ['A0', '1A', 'A', 'A-1', 'a1'])
    def test_split_rejects_malformed(self, code):
        with pytest.raises(ValidationError):
            split_seat_code(code)

    def test_normalize_keeps_client_order(self):
        assert normalize_seat_selection([' b2', 'a1 '], max_seats=10) == ['B2', 'A1']

    def test_normalize_rejects_duplicates_after_normalizing(self):
        with pytest.raises(ValidationError, match='Duplicate seats in request: A1'):
            normalize_seat_selection(['A1', 'a1'], max_seats=10)

    def test_normalize_rejects_empty(self):
        with pytest.raises(ValidationError, match='At least one seat'):
            normalize_seat_selection([], max_seats=10)

    def test_normalize_enforces_max_seats(self):
        with pytest.raises(ValidationError, match='Maximum 2 seats'):
            normalize_seat_selection(['A1', 'A2', 'A3'], max_seats=2)


class TestSeatMap:
    @pytest.fixture
    def seat_map(self):
        return SeatMap.from_tiers(
            [
                SeatTier(tier_name='Recliner', price=500, rows=('A',), seats_per_row=2),
                SeatTier(tier_name='Regular', price=180, rows=('B', 'C'), seats_per_row=3),
            ]
        )

    def test_prices_every_seat_from_its_tier(self, seat_map):
        assert seat_map.seat_codes == ['A1', 'A2', 'B1', 'B2', 'B3', 'C1', 'C2', 'C3']
        assert seat_map.get('A2').price == 500
        assert seat_map.get('C3').tier_name == 'Regular'
        assert seat_map.to_layout()['B1'] == {'tier_name': 'Regular', 'price': 180}

    def test_reports_unknown_seats(self, seat_map):
        assert seat_map.unknown_seats(['A1', 'D1', 'A3']) == ['A3', 'D1']

    def test_row_in_two_tiers_is_rejected(self):
        with pytest.raises(DomainError, match='Row A assigned to both'):
            SeatMap.from_tiers(
                [
                    SeatTier(tier_name='Gold', price=300, rows=('A',), seats_per_row=2),
                    SeatTier(tier_name='Silver', price=200, rows=('A',), seats_per_row=2),
                ]
            )

    @pytest.mark.parametrize(
        'tier, message',
        [
            (SeatTier(tier_name='', price=1, rows=('A',), seats_per_row=1), 'Tier name'),
            (SeatTier(tier_name='T', price=-1, rows=('A',), seats_per_row=1), 'negative'),
            (SeatTier(tier_name='T', price=1, rows=('A',), seats_per_row=0), 'one seat'),
            (SeatTier(tier_name='T', price=1, rows=(), seats_per_row=1), 'no rows'),
            (SeatTier(tier_name='T', price=1, rows=('A1',), seats_per_row=1), 'row label'),
        ],
    )
    def test_invalid_tiers_are_rejected(self, tier, message):
        with pytest.raises(DomainError, match=message):
            SeatMap.from_tiers([tier])

    def test_needs_a_tier(self):
        with pytest.raises(DomainError):
            SeatMap.from_tiers([])
