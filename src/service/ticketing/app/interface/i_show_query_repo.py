from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from src.service.ticketing.domain.entity.show_entity import Show


class IShowQueryRepo(ABC):
    @abstractmethod
    async def get_show(self, *, show_id: str) -> Optional[Show]:
        pass

    async def get_show_layout(self, *, show_id: str) -> Optional[Dict[str, Dict[str, Any]]]:
        """{seat_code: {tier_name, price}}"""
        show = await self.get_show(show_id=show_id)
        return show.seat_map.to_layout() if show else None
