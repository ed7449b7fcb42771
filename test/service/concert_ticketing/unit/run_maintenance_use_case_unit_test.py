from datetime import datetime, timedelta, timezone
from typing import Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import InsufficientInventoryError, InvalidInputError
from src.service.concert_ticketing.app.command.run_maintenance_use_case import (
    RunMaintenanceUseCase,
)
from src.service.concert_ticketing.domain.entity.order_entity import Order, OrderItem
from src.service.concert_ticketing.domain.enum.order_status import OrderStatus


def _order(status: OrderStatus) -> Order:
    order = Order.create(
        user_id=1,
        concert_id=1,
        items=[OrderItem(ticket_type_id=1, qty=1, unit_price=2_500_000, subtotal=2_500_000)],
        ttl_minutes=15,
    )
    order.status = status
    return order


def _make_uow() -> MagicMock:
    uow = MagicMock()
    uow.__aexit__ = AsyncMock(return_value=False)
    uow.commit = AsyncMock()
    uow.order_repo.list_awaiting_payment_before = AsyncMock(return_value=[])
    uow.order_repo.expire_overdue = AsyncMock(return_value=[])
    uow.order_repo.list_paid_without_issuance = AsyncMock(return_value=[])
    return uow


def _sweep(
    uow: MagicMock,
    *,
    payment_gateway: Optional[MagicMock] = None,
    ticket_issuer: Optional[MagicMock] = None,
    batch_size: int = 100,
) -> RunMaintenanceUseCase:
    return RunMaintenanceUseCase(
        uow=uow,
        payment_gateway=payment_gateway or MagicMock(),
        settlement_reconciler=MagicMock(),
        ticket_issuer=ticket_issuer or MagicMock(),
        batch_size=batch_size,
        sync_after_minutes=0,
    )


@pytest.mark.unit
class TestSweepIsolation:
    async def test_failing_sweep_does_not_skip_the_others(self) -> None:
        """
        Given: sync sweep 查詢時 DB 斷線
        When: execute
        Then: expiry 和 recovery 仍然執行, 失敗的 sweep 記在 report
        """
        uow = _make_uow()
        uow.order_repo.list_awaiting_payment_before.side_effect = RuntimeError('connection reset')
        uow.order_repo.expire_overdue.return_value = [uuid7()]

        report = await _sweep(uow).execute()

        assert report.failed_sweeps == ['sync']
        assert report.expired_orders == 1
        uow.order_repo.list_paid_without_issuance.assert_awaited_once()

    async def test_bad_status_body_counts_as_sync_failure(self) -> None:
        """
        Given: 兩筆 AWAITING_PAYMENT; 第一筆 Core API 回傳 gross_amount 'n/a'
        When: execute
        Then: 第一筆記為 sync_failure, 第二筆照常處理, expiry 照常執行
        """
        uow = _make_uow()
        uow.order_repo.list_awaiting_payment_before.return_value = [
            _order(OrderStatus.AWAITING_PAYMENT),
            _order(OrderStatus.AWAITING_PAYMENT),
        ]
        uow.order_repo.expire_overdue.return_value = [uuid7()]
        payment_gateway = MagicMock()
        payment_gateway.query_status = AsyncMock(
            side_effect=[InvalidInputError('Invalid gross_amount: n/a'), None]
        )

        report = await _sweep(uow, payment_gateway=payment_gateway).execute()

        assert report.sync_failures == 1
        assert report.synced_orders == 0
        assert report.expired_orders == 1
        assert report.failed_sweeps == []
        assert payment_gateway.query_status.await_count == 2


@pytest.mark.unit
class TestIssuanceRecoveryPaging:
    async def test_unfulfillable_order_does_not_hide_the_next_one(self) -> None:
        """
        Given: batch_size=1; 最早的 PAID 訂單超賣無法發票, 後面一筆可以發
        When: execute
        Then: 以 (paid_at, id) 翻頁, 兩筆都被處理
        """
        oversold = _order(OrderStatus.PAID)
        recoverable = _order(OrderStatus.PAID)
        paid_at = datetime.now(timezone.utc)
        first_key = (paid_at, oversold.id)
        second_key = (paid_at + timedelta(seconds=1), recoverable.id)

        uow = _make_uow()
        uow.order_repo.list_paid_without_issuance.side_effect = [[first_key], [second_key], []]
        orders = {oversold.id: oversold, recoverable.id: recoverable}
        uow.order_repo.get_by_id = AsyncMock(
            side_effect=lambda *, order_id, for_update: orders[order_id]
        )
        ticket_issuer = MagicMock()
        ticket_issuer.issue_for_order = AsyncMock(
            side_effect=[InsufficientInventoryError('Not enough VIP'), [MagicMock()]]
        )

        report = await _sweep(uow, ticket_issuer=ticket_issuer, batch_size=1).execute()

        assert report.unfulfilled_orders == 1
        assert report.recovered_orders == 1
        cursors = [
            call.kwargs['after']
            for call in uow.order_repo.list_paid_without_issuance.await_args_list
        ]
        assert cursors == [None, first_key, second_key]

    async def test_short_page_ends_the_sweep(self) -> None:
        uow = _make_uow()

        await _sweep(uow, batch_size=10).execute()

        uow.order_repo.list_paid_without_issuance.assert_awaited_once_with(limit=10, after=None)
