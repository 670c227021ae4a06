from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.reservation.domain.seat_record import SeatStatus
from src.service.ticketing.app.dto.availability_snapshot import AvailabilitySnapshot
from src.service.ticketing.app.interface.i_seat_availability_query_handler import (
    ISeatAvailabilityQueryHandler,
)
from src.service.ticketing.app.interface.i_show_query_repo import IShowQueryRepo


class GetSeatAvailabilityUseCase:
    """
    Seat map colouring for the seat picker.

    Advisory only; a stale FREE seat is caught by try_claim at hold time.
    """

    def __init__(
        self,
        *,
        show_query_repo: IShowQueryRepo,
        seat_availability_handler: ISeatAvailabilityQueryHandler,
    ) -> None:
        self.show_query_repo = show_query_repo
        self.seat_availability_handler = seat_availability_handler

    @classmethod
    @inject
    def depends(
        cls,
        show_query_repo: IShowQueryRepo = Depends(Provide[Container.show_query_repo]),
        seat_availability_handler: ISeatAvailabilityQueryHandler = Depends(
            Provide[Container.seat_availability_query_handler]
        ),
    ) -> Self:
        return cls(
            show_query_repo=show_query_repo,
            seat_availability_handler=seat_availability_handler,
        )

    @Logger.io
    async def get_availability(self, *, show_id: str) -> AvailabilitySnapshot:
        show = await self.show_query_repo.get_show(show_id=show_id)
        if not show:
            raise NotFoundError('Show not found')

        snapshot = await self.seat_availability_handler.get_snapshot(show_id=show_id)
        # Seats without a ledger record yet read as FREE
        seats = {
            code: snapshot.seats.get(code, SeatStatus.FREE) for code in show.seat_map.seat_codes
        }
        return AvailabilitySnapshot.build(
            show_id=show_id, seats=seats, snapshot_at=snapshot.snapshot_at
        )
