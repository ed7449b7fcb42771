from collections import Counter
from datetime import datetime, timezone
from typing import List, Self

from fastapi import Depends

from src.platform.config.core_setting import settings
from src.platform.database.unit_of_work import AbstractUnitOfWork, get_unit_of_work
from src.platform.exception.exceptions import InvalidInputError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.concert_ticketing.domain.entity.order_entity import Order, OrderItem


class CreateOrderUseCase:
    """
    Price an order from the catalog and persist it as PENDING.

    Quota is only checked here, never reserved: a ticket type can be
    oversubscribed by PENDING orders. The binding check happens at issuance,
    under a row lock.
    """

    def __init__(
        self,
        *,
        uow: AbstractUnitOfWork,
        ttl_minutes: int = settings.ORDER_TTL_MINUTES,
        max_tickets: int = settings.ORDER_MAX_TICKETS,
        ref_prefix: str = settings.ORDER_REF_PREFIX,
    ) -> None:
        self.uow = uow
        self.ttl_minutes = ttl_minutes
        self.max_tickets = max_tickets
        self.ref_prefix = ref_prefix

    @classmethod
    def depends(cls, uow: AbstractUnitOfWork = Depends(get_unit_of_work)) -> Self:
        return cls(uow=uow)

    def _validate_lines(self, items: List[tuple[int, int]]) -> None:
        if not items:
            raise InvalidInputError('Order must contain at least one item')
        if any(qty < 1 for _, qty in items):
            raise InvalidInputError('Quantity must be at least 1')

        duplicated = [
            ticket_type_id
            for ticket_type_id, count in Counter(tid for tid, _ in items).items()
            if count > 1
        ]
        if duplicated:
            raise InvalidInputError(f'Ticket type {duplicated[0]} appears more than once')

        total = sum(qty for _, qty in items)
        if total > self.max_tickets:
            raise InvalidInputError(
                f'An order can hold at most {self.max_tickets} tickets, got {total}'
            )

    @Logger.io
    async def execute(
        self, *, user_id: int, concert_id: int, items: List[tuple[int, int]]
    ) -> Order:
        """
        items: (ticket_type_id, qty) pairs, each ticket type at most once
        """
        self._validate_lines(items)
        now = datetime.now(timezone.utc)

        async with self.uow:
            concert = await self.uow.catalog_repo.get_concert(concert_id=concert_id)
            if concert is None:
                raise NotFoundError('Concert not found')

            ticket_types = {
                ticket_type.id: ticket_type
                for ticket_type in await self.uow.catalog_repo.get_ticket_types(
                    ticket_type_ids=[ticket_type_id for ticket_type_id, _ in items]
                )
            }

            lines: List[OrderItem] = []
            for ticket_type_id, qty in items:
                ticket_type = ticket_types.get(ticket_type_id)
                if ticket_type is None or ticket_type.concert_id != concert_id:
                    raise InvalidInputError(
                        f'Ticket type {ticket_type_id} does not belong to concert {concert_id}'
                    )
                if not ticket_type.is_on_sale(now):
                    raise InvalidInputError(f'Ticket type {ticket_type.name} is not on sale')
                if not ticket_type.has_capacity_for(qty):
                    raise InvalidInputError(
                        f'Not enough {ticket_type.name} tickets left '
                        f'(remaining {ticket_type.remaining}, requested {qty})'
                    )
                lines.append(OrderItem.snapshot(ticket_type=ticket_type, qty=qty))

            order = Order.create(
                user_id=user_id,
                concert_id=concert_id,
                items=lines,
                ttl_minutes=self.ttl_minutes,
                ref_prefix=self.ref_prefix,
                now=now,
            )
            created = await self.uow.order_repo.create(order=order)
            await self.uow.commit()

        metrics.orders_created.labels(concert_id=str(concert_id)).inc()
        Logger.base.info(
            f'🛒 [ORDER] {created.external_order_ref} created: '
            f'{created.total_quantity} tickets, gross {created.gross_amount}'
        )
        return created
