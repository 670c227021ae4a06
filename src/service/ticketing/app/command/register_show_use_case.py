from datetime import datetime
from typing import Optional, Self, Sequence

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
import uuid_utils

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.reservation.app.interface.i_reservation_ledger import IReservationLedger
from src.service.shared_kernel.domain.clock import Clock
from src.service.ticketing.app.interface.i_show_command_repo import IShowCommandRepo
from src.service.ticketing.domain.entity.show_entity import Show
from src.service.ticketing.domain.value_object.seat_map import SeatMap, SeatTier


class RegisterShowUseCase:
    """
    Register a show together with its seat layout.

    Flow:
    1. Build the seat map from the tiers (prices fixed from here on)
    2. Persist the show; an existing id is a conflict, layouts are never replaced
    3. Create FREE ledger records for every seat (idempotent)
    """

    def __init__(
        self,
        *,
        show_command_repo: IShowCommandRepo,
        ledger: IReservationLedger,
        clock: Clock,
    ) -> None:
        self.show_command_repo = show_command_repo
        self.ledger = ledger
        self.clock = clock
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        show_command_repo: IShowCommandRepo = Depends(Provide[Container.show_command_repo]),
        ledger: IReservationLedger = Depends(Provide[Container.reservation_ledger]),
        clock: Clock = Depends(Provide[Container.clock]),
    ) -> Self:
        return cls(show_command_repo=show_command_repo, ledger=ledger, clock=clock)

    @Logger.io
    async def register_show(
        self,
        *,
        movie_id: str,
        theatre_id: str,
        screen_id: str,
        starts_at: datetime,
        tiers: Sequence[SeatTier],
        is_active: bool = True,
        show_id: Optional[str] = None,
    ) -> Show:
        show_id = show_id or str(uuid_utils.uuid7())
        with self.tracer.start_as_current_span(
            'use_case.register_show', attributes={'show.id': show_id}
        ):
            show = Show(
                id=show_id,
                movie_id=movie_id,
                theatre_id=theatre_id,
                screen_id=screen_id,
                starts_at=starts_at,
                seat_map=SeatMap.from_tiers(tiers),
                is_active=is_active,
                created_at=self.clock(),
            )
            show = await self.show_command_repo.create(show=show)
            await self.ledger.initialize_show(show_id=show.id, seat_codes=show.seat_map.seat_codes)

            Logger.base.info(
                f'🎬 [REGISTER-SHOW] show={show.id} screen={screen_id} '
                f'seats={len(show.seat_map.seats)} tiers={[t.tier_name for t in tiers]}'
            )
            return show
