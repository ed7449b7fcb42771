from typing import Optional, Self
from uuid import UUID

from fastapi import Depends

from src.platform.database.unit_of_work import AbstractUnitOfWork, get_unit_of_work
from src.platform.logging.loguru_io import Logger
from src.service.concert_ticketing.app.service.order_access import (
    expire_if_due,
    get_owned_order,
)
from src.service.concert_ticketing.domain.entity.order_entity import Order
from src.service.concert_ticketing.domain.entity.payment_entity import Payment


class GetPaymentUseCase:
    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    def depends(cls, uow: AbstractUnitOfWork = Depends(get_unit_of_work)) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def execute(self, *, order_id: UUID, user_id: int) -> tuple[Order, Optional[Payment]]:
        """Payment is None until a transaction was initiated or a notification arrived."""
        async with self.uow:
            order = await get_owned_order(self.uow, order_id=order_id, user_id=user_id)
            order = await expire_if_due(self.uow, order)
            payment = await self.uow.payment_repo.get_by_order_id(order_id=order_id)
            await self.uow.commit()
        return order, payment
