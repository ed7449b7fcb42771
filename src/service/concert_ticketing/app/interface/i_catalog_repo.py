from abc import ABC, abstractmethod
from typing import List, Optional

from src.service.concert_ticketing.domain.entity.concert_entity import Concert, TicketType


class ICatalogRepo(ABC):
    """Read-only access to concerts and ticket types (catalog CRUD lives elsewhere)."""

    @abstractmethod
    async def get_concert(self, *, concert_id: int) -> Optional[Concert]:
        pass

    @abstractmethod
    async def get_ticket_types(self, *, ticket_type_ids: List[int]) -> List[TicketType]:
        """Ticket types by id; unknown ids are simply absent from the result."""
        pass
