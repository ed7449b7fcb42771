"""
Owner-scoped order loading and lazy expiry

Used by every read/write path that hands an order back to its owner: a
caller never sees a PENDING/AWAITING_PAYMENT order past its expires_at.
Callers commit.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.concert_ticketing.domain.entity.order_entity import Order
from src.service.concert_ticketing.domain.enum.order_status import OrderStatus
from src.service.concert_ticketing.domain.enum.payment_status import PaymentStatus


async def get_owned_order(
    uow: AbstractUnitOfWork, *, order_id: UUID, user_id: int, for_update: bool = False
) -> Order:
    order = await uow.order_repo.get_by_id(order_id=order_id, for_update=for_update)
    # Someone else's order is indistinguishable from a missing one
    if order is None or order.user_id != user_id:
        raise NotFoundError('Order not found')
    return order


async def expire_if_due(
    uow: AbstractUnitOfWork, order: Order, *, now: Optional[datetime] = None
) -> Order:
    now = now or datetime.now(timezone.utc)
    if not order.is_past_expiry(now):
        return order

    # Re-read under lock: a settlement may have moved the order since it was loaded
    locked = await uow.order_repo.get_by_id(order_id=order.id, for_update=True)
    if locked is None:
        raise NotFoundError('Order not found')
    expired = locked.expire_if_due(now=now)
    if expired is locked:
        return locked

    await uow.order_repo.update_status(order=expired)
    payment = await uow.payment_repo.get_by_order_id(order_id=order.id)
    if payment is not None and payment.status == PaymentStatus.PENDING:
        await uow.payment_repo.upsert(payment=payment.with_status(PaymentStatus.EXPIRED))

    metrics.order_transitions.labels(
        from_status=locked.status.value, to_status=OrderStatus.EXPIRED.value, source='lazy'
    ).inc()
    Logger.base.info(f'⌛ [ORDER] {order.external_order_ref} expired at {order.expires_at}')
    return expired
