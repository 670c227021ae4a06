from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_show_query_repo import IShowQueryRepo
from src.service.ticketing.domain.entity.show_entity import Show


class GetShowLayoutUseCase:
    def __init__(self, show_query_repo: IShowQueryRepo) -> None:
        self.show_query_repo = show_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        show_query_repo: IShowQueryRepo = Depends(Provide[Container.show_query_repo]),
    ) -> Self:
        return cls(show_query_repo=show_query_repo)

    @Logger.io
    async def get_show(self, *, show_id: str) -> Show:
        show = await self.show_query_repo.get_show(show_id=show_id)
        if not show:
            raise NotFoundError('Show not found')
        return show
