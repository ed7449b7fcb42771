from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.platform.types.datetime_types import ensure_utc
from src.service.concert_ticketing.app.interface.i_order_repo import IOrderRepo
from src.service.concert_ticketing.domain.entity.order_entity import Order, OrderItem
from src.service.concert_ticketing.domain.enum.order_status import OrderStatus
from src.service.concert_ticketing.domain.enum.payment_status import PaymentStatus
from src.service.concert_ticketing.domain.order_state_machine import EXPIRABLE_STATUSES
from src.service.concert_ticketing.driven_adapter.model.order_model import (
    OrderItemModel,
    OrderModel,
)
from src.service.concert_ticketing.driven_adapter.model.payment_model import PaymentModel
from src.service.concert_ticketing.driven_adapter.model.ticket_model import TicketIssuanceModel


class OrderRepoImpl(IOrderRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _to_entity(db_order: OrderModel) -> Order:
        return Order(
            id=db_order.id,
            user_id=db_order.user_id,
            concert_id=db_order.concert_id,
            external_order_ref=db_order.external_order_ref,
            gross_amount=db_order.gross_amount,
            expires_at=ensure_utc(db_order.expires_at),
            status=OrderStatus(db_order.status),
            items=[
                OrderItem(
                    id=item.id,
                    order_id=item.order_id,
                    ticket_type_id=item.ticket_type_id,
                    qty=item.qty,
                    unit_price=item.unit_price,
                    subtotal=item.subtotal,
                )
                for item in db_order.items
            ],
            created_at=ensure_utc(db_order.created_at),
            updated_at=ensure_utc(db_order.updated_at),
            paid_at=ensure_utc(db_order.paid_at),
        )

    @Logger.io
    async def create(self, *, order: Order) -> Order:
        db_order = OrderModel(
            id=order.id,
            user_id=order.user_id,
            concert_id=order.concert_id,
            external_order_ref=order.external_order_ref,
            gross_amount=order.gross_amount,
            status=order.status.value,
            expires_at=order.expires_at,
            created_at=order.created_at,
            updated_at=order.updated_at,
            items=[
                OrderItemModel(
                    ticket_type_id=item.ticket_type_id,
                    qty=item.qty,
                    unit_price=item.unit_price,
                    subtotal=item.subtotal,
                )
                for item in order.items
            ],
        )
        self.session.add(db_order)
        await self.session.flush()
        return self._to_entity(db_order)

    async def _get_one(self, *condition, for_update: bool) -> Optional[Order]:
        stmt = select(OrderModel).where(*condition).execution_options(populate_existing=True)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        db_order = result.scalar_one_or_none()
        return self._to_entity(db_order) if db_order else None

    @Logger.io
    async def get_by_id(self, *, order_id: UUID, for_update: bool = False) -> Optional[Order]:
        return await self._get_one(OrderModel.id == order_id, for_update=for_update)

    @Logger.io
    async def get_by_external_ref(
        self, *, external_order_ref: str, for_update: bool = False
    ) -> Optional[Order]:
        return await self._get_one(
            OrderModel.external_order_ref == external_order_ref, for_update=for_update
        )

    @Logger.io
    async def list_by_user(self, *, user_id: int) -> List[Order]:
        stmt = select(OrderModel).where(OrderModel.user_id == user_id)
        stmt = stmt.order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        stmt = stmt.execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return [self._to_entity(db_order) for db_order in result.scalars().all()]

    @Logger.io
    async def update_status(self, *, order: Order) -> Order:
        await self.session.execute(
            update(OrderModel)
            .where(OrderModel.id == order.id)
            .values(status=order.status.value, updated_at=order.updated_at, paid_at=order.paid_at)
        )
        return order

    @Logger.io
    async def expire_overdue(self, *, now: datetime, limit: int) -> List[UUID]:
        result = await self.session.execute(
            select(OrderModel.id)
            .where(
                OrderModel.status.in_([status.value for status in EXPIRABLE_STATUSES]),
                OrderModel.expires_at <= now,
            )
            .order_by(OrderModel.expires_at)
            .limit(limit)
            .with_for_update(skip_locked=True)
        )
        order_ids = list(result.scalars().all())
        if not order_ids:
            return []

        # Bulk form of Order.transition_to(EXPIRED): EXPIRABLE_STATUSES is derived
        # from the transition table. Re-asserted here since a webhook may have won
        # the row in between.
        await self.session.execute(
            update(OrderModel)
            .where(
                OrderModel.id.in_(order_ids),
                OrderModel.status.in_([status.value for status in EXPIRABLE_STATUSES]),
            )
            .values(status=OrderStatus.EXPIRED.value, updated_at=now)
        )
        await self.session.execute(
            update(PaymentModel)
            .where(
                PaymentModel.order_id.in_(order_ids),
                PaymentModel.status == PaymentStatus.PENDING.value,
            )
            .values(status=PaymentStatus.EXPIRED.value, updated_at=now)
        )
        return order_ids

    @Logger.io
    async def list_paid_without_issuance(
        self, *, limit: int, after: Optional[tuple[datetime, UUID]] = None
    ) -> List[tuple[datetime, UUID]]:
        stmt = (
            select(OrderModel.paid_at, OrderModel.id)
            .outerjoin(TicketIssuanceModel, TicketIssuanceModel.order_id == OrderModel.id)
            .where(
                OrderModel.status == OrderStatus.PAID.value,
                TicketIssuanceModel.order_id.is_(None),
            )
        )
        if after is not None:
            # Keyset: the key is passed back exactly as read, naive on sqlite
            paid_at, order_id = after
            stmt = stmt.where(
                or_(
                    OrderModel.paid_at > paid_at,
                    and_(OrderModel.paid_at == paid_at, OrderModel.id > order_id),
                )
            )
        result = await self.session.execute(
            stmt.order_by(OrderModel.paid_at, OrderModel.id).limit(limit)
        )
        return [(row.paid_at, row.id) for row in result.all()]

    @Logger.io
    async def list_awaiting_payment_before(self, *, before: datetime, limit: int) -> List[Order]:
        result = await self.session.execute(
            select(OrderModel)
            .where(
                OrderModel.status == OrderStatus.AWAITING_PAYMENT.value,
                OrderModel.updated_at <= before,
            )
            .order_by(OrderModel.updated_at)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        return [self._to_entity(db_order) for db_order in result.scalars().all()]
