from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from src.service.concert_ticketing.domain.entity.ticket_entity import Ticket
from src.service.concert_ticketing.domain.enum.ticket_status import TicketStatus


class ITicketRepo(ABC):
    @abstractmethod
    async def has_issuance(self, *, order_id: UUID) -> bool:
        pass

    @abstractmethod
    async def create_issuance(self, *, order_id: UUID, ticket_count: int) -> None:
        """
        Insert the issuance marker (primary key = order_id)

        A second insert for the same order violates the key; at most one
        issuance batch ever commits per order.
        """
        pass

    @abstractmethod
    async def create_many(self, *, tickets: List[Ticket]) -> List[Ticket]:
        pass

    @abstractmethod
    async def get_by_id(self, *, ticket_id: UUID) -> Optional[Ticket]:
        pass

    @abstractmethod
    async def get_by_code(self, *, redemption_code: str) -> Optional[Ticket]:
        """Unique-index lookup"""
        pass

    @abstractmethod
    async def list_by_user(self, *, user_id: int) -> List[Ticket]:
        pass

    @abstractmethod
    async def list_by_order(self, *, order_id: UUID) -> List[Ticket]:
        pass

    @abstractmethod
    async def transition_status(
        self,
        *,
        redemption_code: str,
        from_status: TicketStatus,
        to_status: TicketStatus,
        now: datetime,
    ) -> Optional[Ticket]:
        """
        Conditional UPDATE ... WHERE status = from_status

        Returns:
            The updated ticket, or None if the ticket was not in from_status
            (two scanners racing on one code: exactly one gets the ticket)
        """
        pass

    @abstractmethod
    async def void_issued_for_order(self, *, order_id: UUID) -> int:
        """Void every still-ISSUED ticket of an order; returns how many"""
        pass
