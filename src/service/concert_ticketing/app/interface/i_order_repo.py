from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from src.service.concert_ticketing.domain.entity.order_entity import Order


class IOrderRepo(ABC):
    @abstractmethod
    async def create(self, *, order: Order) -> Order:
        """Insert order and its items (caller commits)"""
        pass

    @abstractmethod
    async def get_by_id(self, *, order_id: UUID, for_update: bool = False) -> Optional[Order]:
        pass

    @abstractmethod
    async def get_by_external_ref(
        self, *, external_order_ref: str, for_update: bool = False
    ) -> Optional[Order]:
        pass

    @abstractmethod
    async def list_by_user(self, *, user_id: int) -> List[Order]:
        """Newest first"""
        pass

    @abstractmethod
    async def update_status(self, *, order: Order) -> Order:
        """Persist status, updated_at and paid_at"""
        pass

    @abstractmethod
    async def expire_overdue(self, *, now: datetime, limit: int) -> List[UUID]:
        """
        Move PENDING/AWAITING_PAYMENT orders past expires_at to EXPIRED

        Their still-pending payments become EXPIRED as well.

        Returns:
            Ids of the orders that were expired
        """
        pass

    @abstractmethod
    async def list_paid_without_issuance(
        self, *, limit: int, after: Optional[tuple[datetime, UUID]] = None
    ) -> List[tuple[datetime, UUID]]:
        """
        PAID orders that have no issuance marker, as (paid_at, id) keys in
        ascending order. Pass the last key of a page as `after` to get the next one.
        """
        pass

    @abstractmethod
    async def list_awaiting_payment_before(self, *, before: datetime, limit: int) -> List[Order]:
        """AWAITING_PAYMENT orders last touched before the given time, oldest first"""
        pass
