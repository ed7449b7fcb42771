from typing import Any, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
import orjson

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork, get_unit_of_work
from src.platform.exception.exceptions import AuthenticationError, InvalidInputError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.concert_ticketing.app.dto.settlement_ack import SettlementAck
from src.service.concert_ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.concert_ticketing.app.service.settlement_reconciler import (
    SettlementReconciler,
)
from src.service.concert_ticketing.domain.value_object.payment_report import (
    PaymentStatusReport,
)


class HandlePaymentNotificationUseCase:
    """
    Provider webhook entry point.

    - Malformed body / missing fields -> InvalidInputError (400)
    - Bad signature -> AuthenticationError (401), nothing persisted
    - Everything else is acknowledged; the outcome says what happened
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

    @staticmethod
    def parse(raw_body: bytes) -> PaymentStatusReport:
        try:
            payload: Any = orjson.loads(raw_body)
        except orjson.JSONDecodeError:
            raise InvalidInputError('Notification body is not valid JSON')
        return PaymentStatusReport.from_payload(payload)

    @Logger.io
    async def execute(self, *, raw_body: bytes) -> SettlementAck:
        report = self.parse(raw_body)

        if not self.payment_gateway.verify_notification(report=report):
            metrics.invalid_signatures.inc()
            Logger.base.warning(
                f'🔐 [WEBHOOK] Rejected notification for {report.order_ref}: bad signature'
            )
            raise AuthenticationError('Invalid notification signature')

        async with self.uow:
            ack = await self.settlement_reconciler.reconcile(
                uow=self.uow, report=report, source='webhook'
            )
            await self.uow.commit()
        return ack
