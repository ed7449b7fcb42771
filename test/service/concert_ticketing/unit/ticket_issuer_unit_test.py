from typing import List
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.platform.exception.exceptions import InsufficientInventoryError, InvalidStateError
from src.service.concert_ticketing.app.service.ticket_issuer import TicketIssuer
from src.service.concert_ticketing.domain.entity.concert_entity import TicketType
from src.service.concert_ticketing.domain.entity.order_entity import Order, OrderItem
from src.service.concert_ticketing.domain.enum.order_status import OrderStatus
from src.service.concert_ticketing.domain.enum.ticket_status import TicketStatus


def _paid_order() -> Order:
    order = Order.create(
        user_id=1,
        concert_id=1,
        items=[
            OrderItem(ticket_type_id=2, qty=1, unit_price=750_000, subtotal=750_000),
            OrderItem(ticket_type_id=1, qty=1, unit_price=2_500_000, subtotal=2_500_000),
        ],
        ttl_minutes=15,
    )
    order.status = OrderStatus.PAID
    return order


def _ticket_types(vip_sold: int = 0) -> List[TicketType]:
    return [
        TicketType(id=1, concert_id=1, name='VIP', price=2_500_000, quota_total=10, quota_sold=vip_sold),
        TicketType(id=2, concert_id=1, name='Festival', price=750_000, quota_total=100),
    ]


def _make_uow(*, issued: bool = False, vip_sold: int = 0) -> MagicMock:
    uow = MagicMock()
    uow.ticket_repo.has_issuance = AsyncMock(return_value=issued)
    uow.ticket_repo.create_issuance = AsyncMock()
    uow.ticket_repo.create_many = AsyncMock(side_effect=lambda *, tickets: tickets)
    uow.inventory_ledger_repo.lock_ticket_types = AsyncMock(return_value=_ticket_types(vip_sold))
    uow.inventory_ledger_repo.increment_sold = AsyncMock(return_value=True)
    return uow


@pytest.fixture
def issuer() -> TicketIssuer:
    return TicketIssuer(code_prefix='TKT-')


@pytest.mark.unit
class TestIssueForOrder:
    async def test_one_ticket_per_unit(self, issuer: TicketIssuer) -> None:
        """
        Given: PAID 訂單, VIP x1 + Festival x1
        When: issue_for_order
        Then: 2 張 ISSUED 票, marker 寫入, quota_sold 各 +1
        """
        order = _paid_order()
        uow = _make_uow()

        tickets = await issuer.issue_for_order(uow=uow, order=order)

        assert len(tickets) == 2
        assert all(ticket.status == TicketStatus.ISSUED for ticket in tickets)
        assert all(ticket.order_id == order.id for ticket in tickets)
        assert all(ticket.user_id == order.user_id for ticket in tickets)
        assert len({ticket.redemption_code for ticket in tickets}) == 2
        assert all(ticket.redemption_code.startswith('TKT-') for ticket in tickets)
        uow.ticket_repo.create_issuance.assert_awaited_once_with(order_id=order.id, ticket_count=2)

    async def test_ledger_updated_in_ascending_ticket_type_order(
        self, issuer: TicketIssuer
    ) -> None:
        uow = _make_uow()

        await issuer.issue_for_order(uow=uow, order=_paid_order())

        calls = uow.inventory_ledger_repo.increment_sold.await_args_list
        assert [call.kwargs['ticket_type_id'] for call in calls] == [1, 2]
        locked = uow.inventory_ledger_repo.lock_ticket_types.await_args.kwargs['ticket_type_ids']
        assert sorted(locked) == [1, 2]

    async def test_existing_marker_skips_issuance(self, issuer: TicketIssuer) -> None:
        uow = _make_uow(issued=True)

        tickets = await issuer.issue_for_order(uow=uow, order=_paid_order())

        assert tickets == []
        uow.inventory_ledger_repo.increment_sold.assert_not_awaited()
        uow.ticket_repo.create_many.assert_not_awaited()

    async def test_sold_out_fails_before_any_write(self, issuer: TicketIssuer) -> None:
        """
        Given: VIP 已售 10/10
        When: issue_for_order
        Then: InsufficientInventoryError, 不寫 marker, 不動 ledger
        """
        uow = _make_uow(vip_sold=10)

        with pytest.raises(InsufficientInventoryError):
            await issuer.issue_for_order(uow=uow, order=_paid_order())

        uow.ticket_repo.create_issuance.assert_not_awaited()
        uow.inventory_ledger_repo.increment_sold.assert_not_awaited()
        uow.ticket_repo.create_many.assert_not_awaited()

    async def test_only_paid_orders(self, issuer: TicketIssuer) -> None:
        order = _paid_order()
        order.status = OrderStatus.AWAITING_PAYMENT

        with pytest.raises(InvalidStateError):
            await issuer.issue_for_order(uow=_make_uow(), order=order)
