from typing import Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork, get_unit_of_work
from src.platform.logging.loguru_io import Logger
from src.service.concert_ticketing.app.dto.settlement_ack import SettlementAck
from src.service.concert_ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.concert_ticketing.app.service.order_access import get_owned_order
from src.service.concert_ticketing.app.service.settlement_reconciler import (
    SettlementReconciler,
)
from src.service.concert_ticketing.domain.enum.settlement_outcome import SettlementOutcome


class SyncPaymentStatusUseCase:
    """
    Pull the provider's view of one order and reconcile it.

    For buyers whose webhook never arrived. Goes through the same
    reconciler as the webhook, so replaying a known status is a no-op.
    """

    def __init__(
        self,
        *,
        uow: AbstractUnitOfWork,
        payment_gateway: IPaymentGateway,
        settlement_reconciler: SettlementReconciler,
    ) -> None:
        self.uow = uow
        self.payment_gateway = payment_gateway
        self.settlement_reconciler = settlement_reconciler

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(get_unit_of_work),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
        settlement_reconciler: SettlementReconciler = Depends(
            Provide[Container.settlement_reconciler]
        ),
    ) -> Self:
        return cls(
            uow=uow,
            payment_gateway=payment_gateway,
            settlement_reconciler=settlement_reconciler,
        )

    @Logger.io
    async def execute(self, *, order_id: UUID, user_id: int) -> SettlementAck:
        async with self.uow:
            order = await get_owned_order(self.uow, order_id=order_id, user_id=user_id)

        report = await self.payment_gateway.query_status(order_ref=order.external_order_ref)
        if report is None:
            Logger.base.info(f'🔍 [SYNC] Provider has no transaction for {order.external_order_ref}')
            return SettlementAck(
                outcome=SettlementOutcome.IGNORED,
                order_ref=order.external_order_ref,
                order_status=order.status,
            )

        async with self.uow:
            ack = await self.settlement_reconciler.reconcile(
                uow=self.uow, report=report, source='sync'
            )
            await self.uow.commit()
        return ack
