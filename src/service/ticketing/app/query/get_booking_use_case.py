from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import ForbiddenError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.state.transient_retry import retry_transient
from src.service.ticketing.app.interface.i_booking_query_repo import IBookingQueryRepo
from src.service.ticketing.domain.entity.booking_entity import Booking
from src.service.ticketing.domain.entity.user_entity import UserEntity


class GetBookingUseCase:
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
    async def get_booking(self, *, booking_id: str, current_user: UserEntity) -> Booking:
        booking = await retry_transient(
            lambda: self.booking_query_repo.get_by_id(booking_id=booking_id),
            op_name='get_booking',
        )
        if not booking:
            raise NotFoundError('Booking not found')
        if not current_user.can_access_booking_of(booking.user_id):
            raise ForbiddenError('Access denied')
        return booking
