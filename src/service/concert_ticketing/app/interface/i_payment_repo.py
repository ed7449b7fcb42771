from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.service.concert_ticketing.domain.entity.payment_entity import Payment


class IPaymentRepo(ABC):
    @abstractmethod
    async def get_by_order_id(self, *, order_id: UUID) -> Optional[Payment]:
        pass

    @abstractmethod
    async def upsert(self, *, payment: Payment) -> Payment:
        """Insert or update the single payment row of payment.order_id"""
        pass
