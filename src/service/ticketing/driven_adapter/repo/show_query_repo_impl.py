"""Show Query Repository Implementation (Kvrocks)"""

from typing import Callable, Optional

from src.platform.state.kvrocks_client import KvrocksClientType, kvrocks_client
from src.platform.state.transient_retry import retry_transient
from src.service.ticketing.app.interface.i_show_query_repo import IShowQueryRepo
from src.service.ticketing.domain.entity.show_entity import Show
from src.service.ticketing.driven_adapter.repo.booking_command_repo_impl import store_errors
from src.service.ticketing.driven_adapter.repo.repo_helper.entity_serializer import load_show
from src.service.ticketing.driven_adapter.repo.repo_helper.key_str_generator import make_show_key


class ShowQueryRepoImpl(IShowQueryRepo):
    def __init__(
        self, *, client_factory: Callable[[], KvrocksClientType] = kvrocks_client.get_client
    ) -> None:
        self._client_factory = client_factory

    async def _fetch(self, show_id: str) -> Optional[Show]:
        async with store_errors('get_show'):
            raw = await self._client_factory().get(  # type: ignore[misc]
                make_show_key(show_id=show_id)
            )
        return load_show(raw) if raw else None

    async def get_show(self, *, show_id: str) -> Optional[Show]:
        # Read-only, so safe to retry
        return await retry_transient(lambda: self._fetch(show_id), op_name='get_show')
