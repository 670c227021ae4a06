from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, field_validator

from src.service.ticketing.app.dto.availability_snapshot import AvailabilitySnapshot
from src.service.ticketing.domain.entity.show_entity import Show
from src.service.ticketing.domain.value_object.seat_map import SeatTier


class SeatTierSchema(BaseModel):
    tier_name: str
    price: int  # INR
    rows: List[str]
    seats_per_row: int

    def to_domain(self) -> SeatTier:
        return SeatTier(
            tier_name=self.tier_name.strip(),
            price=self.price,
            rows=[row.strip().upper() for row in self.rows],
            seats_per_row=self.seats_per_row,
        )


class ShowCreateRequest(BaseModel):
    show_id: Optional[str] = None
    movie_id: str
    theatre_id: str
    screen_id: str
    starts_at: datetime
    is_active: bool = True
    tiers: List[SeatTierSchema]

    model_config = {
        'json_schema_extra': {
            'example': {
                'movie_id': 'tt0111161',
                'theatre_id': 'pvr-forum',
                'screen_id': 'screen-2',
                'starts_at': '2025-01-10T18:30:00+05:30',
                'tiers': [
                    {'tier_name': 'Premium', 'price': 350, 'rows': ['A'], 'seats_per_row': 12},
                    {'tier_name': 'Regular', 'price': 200, 'rows': ['B', 'C'], 'seats_per_row': 14},
                ],
            }
        }
    }

    @field_validator('starts_at')
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        return v if v.tzinfo else v.replace(tzinfo=timezone.utc)


class SeatLayoutEntry(BaseModel):
    tier_name: str
    price: int


class ShowLayoutResponse(BaseModel):
    show_id: str
    movie_id: str
    theatre_id: str
    screen_id: str
    starts_at: datetime
    is_active: bool
    tiers: List[SeatTierSchema]
    seats: Dict[str, SeatLayoutEntry]

    @classmethod
    def from_entity(cls, show: Show) -> 'ShowLayoutResponse':
        return cls(
            show_id=show.id,
            movie_id=show.movie_id,
            theatre_id=show.theatre_id,
            screen_id=show.screen_id,
            starts_at=show.starts_at,
            is_active=show.is_active,
            tiers=[
                SeatTierSchema(
                    tier_name=tier.tier_name,
                    price=tier.price,
                    rows=list(tier.rows),
                    seats_per_row=tier.seats_per_row,
                )
                for tier in show.seat_map.tiers
            ],
            seats={
                code: SeatLayoutEntry(**entry) for code, entry in show.seat_map.to_layout().items()
            },
        )


class AvailabilityResponse(BaseModel):
    show_id: str
    seats: Dict[str, str]  # seat_code -> free | held | booked
    counts: Dict[str, int]
    snapshot_at: datetime

    @classmethod
    def from_snapshot(cls, snapshot: AvailabilitySnapshot) -> 'AvailabilityResponse':
        return cls(
            show_id=snapshot.show_id,
            seats={code: state.value for code, state in snapshot.seats.items()},
            counts=snapshot.counts,
            snapshot_at=snapshot.snapshot_at,
        )
