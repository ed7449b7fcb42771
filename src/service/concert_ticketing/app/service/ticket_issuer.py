from collections import Counter
from datetime import datetime, timezone
from typing import List

from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import InsufficientInventoryError, InvalidStateError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.concert_ticketing.domain.entity.order_entity import Order
from src.service.concert_ticketing.domain.entity.ticket_entity import Ticket
from src.service.concert_ticketing.domain.enum.order_status import OrderStatus


class TicketIssuer:
    """
    Issue the ticket batch of a paid order, exactly once.

    Runs inside the caller's transaction, with the order row already locked.

    Flow:
    1. Skip when the issuance marker exists (duplicate webhook, sweep rerun)
    2. Lock the involved ticket types (ascending id) and check every line fits
       -> InsufficientInventoryError, nothing written
    3. Insert the marker, increment quota_sold per ticket type, create one
       ticket per unit of quantity
    """

    def __init__(self, *, code_prefix: str = 'TKT-') -> None:
        self.code_prefix = code_prefix

    @Logger.io
    async def issue_for_order(self, *, uow: AbstractUnitOfWork, order: Order) -> List[Ticket]:
        if order.status != OrderStatus.PAID:
            raise InvalidStateError(
                f'Tickets are only issued for paid orders. Current status: {order.status.value}'
            )

        if await uow.ticket_repo.has_issuance(order_id=order.id):
            Logger.base.info(f'🎫 [ISSUER] Order {order.id} already issued, skipping')
            return []

        qty_by_type: Counter[int] = Counter()
        for item in order.items:
            qty_by_type[item.ticket_type_id] += item.qty

        ticket_types = {
            ticket_type.id: ticket_type
            for ticket_type in await uow.inventory_ledger_repo.lock_ticket_types(
                ticket_type_ids=list(qty_by_type)
            )
        }
        for ticket_type_id, qty in sorted(qty_by_type.items()):
            ticket_type = ticket_types.get(ticket_type_id)
            if ticket_type is None:
                raise InsufficientInventoryError(f'Ticket type {ticket_type_id} no longer exists')
            if not ticket_type.has_capacity_for(qty):
                raise InsufficientInventoryError(
                    f'Ticket type {ticket_type.name} has {ticket_type.remaining} left, '
                    f'order {order.external_order_ref} needs {qty}'
                )

        total = sum(qty_by_type.values())
        await uow.ticket_repo.create_issuance(order_id=order.id, ticket_count=total)

        for ticket_type_id, qty in sorted(qty_by_type.items()):
            if not await uow.inventory_ledger_repo.increment_sold(
                ticket_type_id=ticket_type_id, qty=qty
            ):
                # Capacity was checked under the row lock; reaching this means the lock failed
                raise RuntimeError(
                    f'quota_sold guard rejected ticket type {ticket_type_id} (+{qty}) '
                    f'after the capacity check for order {order.id}'
                )

        now = datetime.now(timezone.utc)
        tickets = [
            Ticket.issue(
                order_id=order.id,
                user_id=order.user_id,
                concert_id=order.concert_id,
                ticket_type_id=item.ticket_type_id,
                code_prefix=self.code_prefix,
                now=now,
            )
            for item in order.items
            for _ in range(item.qty)
        ]
        await uow.ticket_repo.create_many(tickets=tickets)

        metrics.tickets_issued.inc(len(tickets))
        Logger.base.info(f'🎫 [ISSUER] Issued {len(tickets)} tickets for order {order.id}')
        return tickets
