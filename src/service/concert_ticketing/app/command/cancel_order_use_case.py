from datetime import datetime, timezone
from typing import Self
from uuid import UUID

from fastapi import Depends

from src.platform.database.unit_of_work import AbstractUnitOfWork, get_unit_of_work
from src.platform.exception.exceptions import InvalidStateError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.concert_ticketing.app.service.order_access import (
    expire_if_due,
    get_owned_order,
)
from src.service.concert_ticketing.domain.entity.order_entity import Order
from src.service.concert_ticketing.domain.enum.order_status import OrderStatus
from src.service.concert_ticketing.domain.enum.payment_status import PaymentStatus


class CancelOrderUseCase:
    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    def depends(cls, uow: AbstractUnitOfWork = Depends(get_unit_of_work)) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def execute(self, *, order_id: UUID, user_id: int) -> Order:
        """
        Buyer cancels a PENDING order.

        An order past its expiry is expired (and that is committed) before the
        request is rejected, so the caller sees EXPIRED on the next read.
        """
        now = datetime.now(timezone.utc)
        async with self.uow:
            order = await get_owned_order(
                self.uow, order_id=order_id, user_id=user_id, for_update=True
            )
            checked = await expire_if_due(self.uow, order, now=now)
            if checked.status == OrderStatus.EXPIRED and order.status != OrderStatus.EXPIRED:
                await self.uow.commit()
                raise InvalidStateError('Order has expired')

            cancelled = checked.cancel(now=now)
            await self.uow.order_repo.update_status(order=cancelled)

            payment = await self.uow.payment_repo.get_by_order_id(order_id=order_id)
            if payment is not None and payment.status == PaymentStatus.PENDING:
                await self.uow.payment_repo.upsert(
                    payment=payment.with_status(PaymentStatus.CANCELLED)
                )
            await self.uow.commit()

        metrics.order_transitions.labels(
            from_status=checked.status.value, to_status=cancelled.status.value, source='buyer'
        ).inc()
        Logger.base.info(f'🚫 [ORDER] {cancelled.external_order_ref} cancelled by buyer')
        return cancelled
