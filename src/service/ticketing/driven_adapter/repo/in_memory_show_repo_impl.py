"""In-process show catalog (single node). Serves both the command and query side."""

from typing import Dict, Optional

from src.platform.exception.exceptions import ConflictError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_show_command_repo import IShowCommandRepo
from src.service.ticketing.app.interface.i_show_query_repo import IShowQueryRepo
from src.service.ticketing.domain.entity.show_entity import Show


class InMemoryShowRepoImpl(IShowCommandRepo, IShowQueryRepo):
    def __init__(self) -> None:
        self._shows: Dict[str, Show] = {}

    @Logger.io
    async def create(self, *, show: Show) -> Show:
        if show.id in self._shows:
            raise ConflictError(f'Show {show.id} already exists')
        self._shows[show.id] = show
        return show

    async def get_show(self, *, show_id: str) -> Optional[Show]:
        return self._shows.get(show_id)

    def clear(self) -> None:
        self._shows.clear()
