from datetime import datetime, timedelta, timezone
from typing import List, Optional
from uuid import UUID

import attrs
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import InvalidStateError
from src.platform.logging.loguru_io import Logger
from src.service.concert_ticketing.domain.entity.concert_entity import TicketType
from src.service.concert_ticketing.domain.enum.order_status import OrderStatus
from src.service.concert_ticketing.domain.order_state_machine import (
    EXPIRABLE_STATUSES,
    can_transition,
    transition_path,
)


@attrs.define
class OrderItem:
    ticket_type_id: int
    qty: int
    unit_price: int
    subtotal: int
    id: Optional[int] = None
    order_id: Optional[UUID] = None
    ticket_type_name: str = ''

    @classmethod
    def snapshot(cls, *, ticket_type: TicketType, qty: int) -> 'OrderItem':
        """Freeze the current price; later catalog price edits never reach this line."""
        return cls(
            ticket_type_id=ticket_type.id,
            qty=qty,
            unit_price=ticket_type.price,
            subtotal=ticket_type.price * qty,
            ticket_type_name=ticket_type.name,
        )


@attrs.define
class Order:
    id: UUID
    user_id: int
    concert_id: int
    external_order_ref: str
    gross_amount: int
    expires_at: datetime
    status: OrderStatus = OrderStatus.PENDING
    items: List[OrderItem] = attrs.field(factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        user_id: int,
        concert_id: int,
        items: List[OrderItem],
        ttl_minutes: int,
        ref_prefix: str = 'ORDER-',
        now: Optional[datetime] = None,
    ) -> 'Order':
        now = now or datetime.now(timezone.utc)
        order_id = uuid7()
        return cls(
            id=order_id,
            user_id=user_id,
            concert_id=concert_id,
            external_order_ref=f'{ref_prefix}{order_id.hex}',
            gross_amount=sum(item.subtotal for item in items),
            expires_at=now + timedelta(minutes=ttl_minutes),
            status=OrderStatus.PENDING,
            items=[attrs.evolve(item, order_id=order_id) for item in items],
            created_at=now,
            updated_at=now,
        )

    @property
    def total_quantity(self) -> int:
        return sum(item.qty for item in self.items)

    def is_past_expiry(self, now: datetime) -> bool:
        return self.status in EXPIRABLE_STATUSES and now >= self.expires_at

    @Logger.io
    def transition_to(self, target: OrderStatus, *, now: Optional[datetime] = None) -> 'Order':
        if not can_transition(self.status, target):
            raise InvalidStateError(
                f'Cannot transition order from {self.status.value} to {target.value}'
            )
        now = now or datetime.now(timezone.utc)
        paid_at = now if target == OrderStatus.PAID else self.paid_at
        return attrs.evolve(self, status=target, updated_at=now, paid_at=paid_at)

    def path_to(self, target: OrderStatus) -> Optional[List[OrderStatus]]:
        return transition_path(self.status, target)

    def expire_if_due(self, *, now: Optional[datetime] = None) -> 'Order':
        """Lazy expiry: callers never observe a PENDING/AWAITING_PAYMENT order past expires_at."""
        now = now or datetime.now(timezone.utc)
        if not self.is_past_expiry(now):
            return self
        return self.transition_to(OrderStatus.EXPIRED, now=now)

    @Logger.io
    def cancel(self, *, now: Optional[datetime] = None) -> 'Order':
        if self.status != OrderStatus.PENDING:
            raise InvalidStateError(
                f'Order cannot be cancelled. Current status: {self.status.value}'
            )
        return self.transition_to(OrderStatus.CANCELLED, now=now)

    def ensure_payable(self, *, now: Optional[datetime] = None) -> None:
        now = now or datetime.now(timezone.utc)
        if self.status == OrderStatus.EXPIRED or self.is_past_expiry(now):
            raise InvalidStateError('Order has expired')
        if self.status != OrderStatus.PENDING:
            raise InvalidStateError(f'Order cannot be paid. Current status: {self.status.value}')
