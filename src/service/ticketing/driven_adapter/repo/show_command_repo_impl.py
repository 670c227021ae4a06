"""Show Command Repository Implementation (Kvrocks)"""

from typing import Callable

from src.platform.exception.exceptions import ConflictError
from src.platform.logging.loguru_io import Logger
from src.platform.state.kvrocks_client import KvrocksClientType, kvrocks_client
from src.service.ticketing.app.interface.i_show_command_repo import IShowCommandRepo
from src.service.ticketing.domain.entity.show_entity import Show
from src.service.ticketing.driven_adapter.repo.booking_command_repo_impl import store_errors
from src.service.ticketing.driven_adapter.repo.repo_helper.entity_serializer import dump_show
from src.service.ticketing.driven_adapter.repo.repo_helper.key_str_generator import make_show_key


class ShowCommandRepoImpl(IShowCommandRepo):
    def __init__(
        self, *, client_factory: Callable[[], KvrocksClientType] = kvrocks_client.get_client
    ) -> None:
        self._client_factory = client_factory

    @Logger.io
    async def create(self, *, show: Show) -> Show:
        async with store_errors('create_show'):
            created = await self._client_factory().set(  # type: ignore[misc]
                make_show_key(show_id=show.id), dump_show(show), nx=True
            )
        if not created:
            raise ConflictError(f'Show {show.id} already exists')
        return show
