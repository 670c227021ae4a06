from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import attrs

from src.platform.exception.exceptions import DomainError
from src.service.ticketing.domain.value_object.seat_code import ROW_PATTERN, make_seat_code


@attrs.frozen
class SeatTier:
    tier_name: str
    price: int  # INR
    rows: tuple[str, ...] = attrs.field(converter=tuple)
    seats_per_row: int


@attrs.frozen
class Seat:
    seat_code: str
    row: str
    column: int
    tier_name: str
    price: int


@attrs.frozen
class SeatMap:
    """
    Layout of a show, fixed when the show is registered.

    Each seat's price is resolved from its tier here and never recomputed.
    """

    tiers: tuple[SeatTier, ...]
    seats: Mapping[str, Seat] = attrs.field(eq=False, hash=False)

    @classmethod
    def from_tiers(cls, tiers: Sequence[SeatTier]) -> 'SeatMap':
        if not tiers:
            raise DomainError('Seat map needs at least one tier')

        seats: Dict[str, Seat] = {}
        row_owner: Dict[str, str] = {}
        tier_names: set[str] = set()
        for tier in tiers:
            if not tier.tier_name.strip():
                raise DomainError('Tier name is required')
            if tier.tier_name in tier_names:
                raise DomainError(f'Duplicate tier: {tier.tier_name}')
            tier_names.add(tier.tier_name)
            if tier.price < 0:
                raise DomainError(f'Tier {tier.tier_name} price must not be negative')
            if tier.seats_per_row < 1:
                raise DomainError(f'Tier {tier.tier_name} needs at least one seat per row')
            if not tier.rows:
                raise DomainError(f'Tier {tier.tier_name} has no rows')

            for row in tier.rows:
                if not ROW_PATTERN.match(row):
                    raise DomainError(f'Invalid row label: {row!r}')
                if row in row_owner:
                    raise DomainError(
                        f'Row {row} assigned to both {row_owner[row]} and {tier.tier_name}'
                    )
                row_owner[row] = tier.tier_name
                for column in range(1, tier.seats_per_row + 1):
                    code = make_seat_code(row, column)
                    seats[code] = Seat(
                        seat_code=code,
                        row=row,
                        column=column,
                        tier_name=tier.tier_name,
                        price=tier.price,
                    )

        return cls(tiers=tuple(tiers), seats=dict(sorted(seats.items())))

    @property
    def seat_codes(self) -> List[str]:
        return list(self.seats)

    def get(self, seat_code: str) -> Optional[Seat]:
        return self.seats.get(seat_code)

    def unknown_seats(self, seat_codes: Iterable[str]) -> List[str]:
        return sorted(code for code in seat_codes if code not in self.seats)

    def to_layout(self) -> Dict[str, Dict[str, Any]]:
        """{seat_code: {tier_name, price}}"""
        return {
            code: {'tier_name': seat.tier_name, 'price': seat.price}
            for code, seat in self.seats.items()
        }
