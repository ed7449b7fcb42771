from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.platform.types.datetime_types import ensure_utc, utc_now
from src.service.concert_ticketing.app.interface.i_payment_repo import IPaymentRepo
from src.service.concert_ticketing.domain.entity.payment_entity import Payment
from src.service.concert_ticketing.domain.enum.payment_status import (
    PaymentProvider,
    PaymentStatus,
)
from src.service.concert_ticketing.driven_adapter.model.payment_model import PaymentModel


class PaymentRepoImpl(IPaymentRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _to_entity(db_payment: PaymentModel) -> Payment:
        return Payment(
            id=db_payment.id,
            order_id=db_payment.order_id,
            provider=PaymentProvider(db_payment.provider),
            status=PaymentStatus(db_payment.status),
            gateway_token=db_payment.gateway_token,
            redirect_url=db_payment.redirect_url,
            last_transaction_status=db_payment.last_transaction_status,
            last_fraud_status=db_payment.last_fraud_status,
            last_raw_notification=db_payment.last_raw_notification,
            created_at=ensure_utc(db_payment.created_at),
            updated_at=ensure_utc(db_payment.updated_at),
        )

    async def _get_model(self, order_id: UUID) -> Optional[PaymentModel]:
        result = await self.session.execute(
            select(PaymentModel)
            .where(PaymentModel.order_id == order_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @Logger.io
    async def get_by_order_id(self, *, order_id: UUID) -> Optional[Payment]:
        db_payment = await self._get_model(order_id)
        return self._to_entity(db_payment) if db_payment else None

    @Logger.io
    async def upsert(self, *, payment: Payment) -> Payment:
        # Callers hold the order row lock, so select-then-write cannot race on order_id
        db_payment = await self._get_model(payment.order_id)
        if db_payment is None:
            db_payment = PaymentModel(order_id=payment.order_id)
            db_payment.created_at = payment.created_at or utc_now()
            self.session.add(db_payment)

        db_payment.provider = payment.provider.value
        db_payment.status = payment.status.value
        db_payment.gateway_token = payment.gateway_token
        db_payment.redirect_url = payment.redirect_url
        db_payment.last_transaction_status = payment.last_transaction_status
        db_payment.last_fraud_status = payment.last_fraud_status
        db_payment.last_raw_notification = payment.last_raw_notification
        db_payment.updated_at = payment.updated_at or utc_now()

        await self.session.flush()
        return self._to_entity(db_payment)
