from typing import List, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.platform.state.transient_retry import retry_transient
from src.service.ticketing.app.interface.i_booking_query_repo import IBookingQueryRepo
from src.service.ticketing.domain.entity.booking_entity import Booking, BookingStatus


class ListBookingsUseCase:
    def __init__(self, booking_query_repo: IBookingQueryRepo) -> None:
        self.booking_query_repo = booking_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        booking_query_repo: IBookingQueryRepo = Depends(Provide[Container.booking_query_repo]),
    ) -> Self:
        return cls(booking_query_repo=booking_query_repo)

    @Logger.io
    async def list_user_bookings(
        self, *, user_id: str, status: Optional[BookingStatus] = None
    ) -> List[Booking]:
        """Newest first"""
        return await retry_transient(
            lambda: self.booking_query_repo.list_by_user(user_id=user_id, status=status),
            op_name='list_user_bookings',
        )
