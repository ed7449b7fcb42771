from datetime import datetime, timezone
from typing import List, Optional, Self

from fastapi import Depends

from src.platform.database.unit_of_work import AbstractUnitOfWork, get_unit_of_work
from src.platform.logging.loguru_io import Logger
from src.service.concert_ticketing.app.service.order_access import expire_if_due
from src.service.concert_ticketing.domain.entity.order_entity import Order
from src.service.concert_ticketing.domain.enum.order_status import OrderStatus


class ListOrdersUseCase:
    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    def depends(cls, uow: AbstractUnitOfWork = Depends(get_unit_of_work)) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def execute(self, *, user_id: int, status: Optional[OrderStatus] = None) -> List[Order]:
        now = datetime.now(timezone.utc)
        async with self.uow:
            # Filter after lazy expiry: an overdue PENDING row is EXPIRED to the caller
            orders = [
                await expire_if_due(self.uow, order, now=now)
                for order in await self.uow.order_repo.list_by_user(user_id=user_id)
            ]
            await self.uow.commit()

        if status is not None:
            orders = [order for order in orders if order.status == status]
        return orders
