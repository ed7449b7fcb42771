from abc import ABC, abstractmethod
from typing import List

from src.service.concert_ticketing.domain.entity.concert_entity import TicketType


class IInventoryLedgerRepo(ABC):
    """
    quota_total vs quota_sold per ticket type.

    Never oversells: increments are conditional on the remaining quota.
    """

    @abstractmethod
    async def lock_ticket_types(self, *, ticket_type_ids: List[int]) -> List[TicketType]:
        """
        SELECT ... FOR UPDATE in ascending id order

        Concurrent settlements touching overlapping ticket types always lock
        in the same order.
        """
        pass

    @abstractmethod
    async def increment_sold(self, *, ticket_type_id: int, qty: int) -> bool:
        """
        Atomically add qty to quota_sold if it still fits

        Returns:
            False when the increment would exceed quota_total (nothing changed)
        """
        pass
