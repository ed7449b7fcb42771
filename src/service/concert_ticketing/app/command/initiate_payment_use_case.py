import math
from datetime import datetime, timezone
from typing import Self
from uuid import UUID

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork, get_unit_of_work
from src.platform.exception.exceptions import InvalidStateError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.concert_ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.concert_ticketing.app.service.order_access import (
    expire_if_due,
    get_owned_order,
)
from src.service.concert_ticketing.domain.entity.order_entity import Order
from src.service.concert_ticketing.domain.entity.payment_entity import Payment
from src.service.concert_ticketing.domain.entity.user_entity import UserEntity
from src.service.concert_ticketing.domain.enum.order_status import OrderStatus
from src.service.concert_ticketing.domain.enum.payment_status import PaymentStatus
from src.service.concert_ticketing.domain.value_object.gateway_transaction import (
    GatewayLineItem,
    GatewayTransactionRequest,
)


class InitiatePaymentUseCase:
    """
    Open a provider transaction for a PENDING order.

    Flow:
    1. Txn 1: owner check, lazy expiry, payable check, build the request
    2. Call the gateway with no transaction open (no row lock held over HTTP)
    3. Txn 2: re-lock, re-check, PENDING -> AWAITING_PAYMENT, store token

    A gateway failure leaves the order PENDING, so the buyer can retry.
    """

    def __init__(self, *, uow: AbstractUnitOfWork, payment_gateway: IPaymentGateway) -> None:
        self.uow = uow
        self.payment_gateway = payment_gateway

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(get_unit_of_work),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
    ) -> Self:
        return cls(uow=uow, payment_gateway=payment_gateway)

    async def _build_request(
        self, *, order: Order, user: UserEntity, now: datetime
    ) -> GatewayTransactionRequest:
        concert = await self.uow.catalog_repo.get_concert(concert_id=order.concert_id)
        ticket_types = {
            ticket_type.id: ticket_type
            for ticket_type in await self.uow.catalog_repo.get_ticket_types(
                ticket_type_ids=[item.ticket_type_id for item in order.items]
            )
        }
        concert_title = concert.title if concert else f'Concert {order.concert_id}'

        line_items = []
        for item in order.items:
            ticket_type = ticket_types.get(item.ticket_type_id)
            type_name = ticket_type.name if ticket_type else str(item.ticket_type_id)
            line_items.append(
                GatewayLineItem(
                    id=str(item.ticket_type_id),
                    price=item.unit_price,
                    quantity=item.qty,
                    name=f'{concert_title} - {type_name}',
                )
            )

        remaining_seconds = (order.expires_at - now).total_seconds()
        return GatewayTransactionRequest(
            order_ref=order.external_order_ref,
            gross_amount=order.gross_amount,
            items=line_items,
            customer_name=user.name or user.email,
            customer_email=user.email,
            customer_phone=user.phone,
            expiry_minutes=max(math.ceil(remaining_seconds / 60), 1),
        )

    @Logger.io
    async def execute(self, *, order_id: UUID, user: UserEntity) -> tuple[Order, Payment]:
        now = datetime.now(timezone.utc)
        async with self.uow:
            order = await get_owned_order(
                self.uow, order_id=order_id, user_id=user.id, for_update=True
            )
            checked = await expire_if_due(self.uow, order, now=now)
            if checked.status == OrderStatus.EXPIRED and order.status != OrderStatus.EXPIRED:
                await self.uow.commit()
                raise InvalidStateError('Order has expired')
            checked.ensure_payable(now=now)
            request = await self._build_request(order=checked, user=user, now=now)

        transaction = await self.payment_gateway.create_transaction(request=request)

        async with self.uow:
            order = await self.uow.order_repo.get_by_id(order_id=order_id, for_update=True)
            if order is None:
                raise NotFoundError('Order not found')

            now = datetime.now(timezone.utc)
            if order.is_past_expiry(now):
                await expire_if_due(self.uow, order, now=now)
                await self.uow.commit()
                raise InvalidStateError('Order has expired')

            if order.status == OrderStatus.PENDING:
                awaiting = order.transition_to(OrderStatus.AWAITING_PAYMENT, now=now)
                await self.uow.order_repo.update_status(order=awaiting)
                metrics.order_transitions.labels(
                    from_status=order.status.value,
                    to_status=awaiting.status.value,
                    source='initiate',
                ).inc()
                order = awaiting
            elif order.status != OrderStatus.AWAITING_PAYMENT:
                # A provider notification closed the order while the gateway was called
                raise InvalidStateError(
                    f'Order cannot be paid. Current status: {order.status.value}'
                )

            existing = await self.uow.payment_repo.get_by_order_id(order_id=order_id)
            if existing is None:
                payment = Payment.start(
                    order_id=order_id,
                    gateway_token=transaction.token,
                    redirect_url=transaction.redirect_url,
                )
            else:
                # An early "pending" notification may have created the row already
                payment = attrs.evolve(
                    existing,
                    gateway_token=transaction.token,
                    redirect_url=transaction.redirect_url,
                    updated_at=now,
                )
            if payment.status != PaymentStatus.PENDING:
                raise InvalidStateError(
                    f'Payment cannot be initiated. Current status: {payment.status.value}'
                )
            payment = await self.uow.payment_repo.upsert(payment=payment)
            await self.uow.commit()

        Logger.base.info(f'💳 [PAYMENT] {order.external_order_ref} awaiting payment')
        return order, payment
