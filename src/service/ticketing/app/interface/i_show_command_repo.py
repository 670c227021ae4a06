from abc import ABC, abstractmethod

from src.service.ticketing.domain.entity.show_entity import Show


class IShowCommandRepo(ABC):
    @abstractmethod
    async def create(self, *, show: Show) -> Show:
        """
        Raises:
            ConflictError: show id already registered (layouts are never replaced)
        """
        pass
