"""
Recovery sweeps

- POST /api/maintenance/reconcile (admin) runs expiry and issuance recovery
- Stale AWAITING_PAYMENT orders are re-read from Midtrans
"""

from typing import Any

import httpx
import pytest

from src.platform.database.orm_db_setting import Database
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork
from src.service.concert_ticketing.app.command.run_maintenance_use_case import (
    RunMaintenanceUseCase,
)
from src.service.concert_ticketing.app.service.settlement_reconciler import (
    SettlementReconciler,
)
from src.service.concert_ticketing.app.service.ticket_issuer import TicketIssuer
from src.service.concert_ticketing.domain.entity.order_entity import Order, OrderItem
from src.service.concert_ticketing.domain.enum.order_status import OrderStatus
from src.service.concert_ticketing.driven_adapter.payment_gateway.midtrans_payment_gateway import (
    MidtransPaymentGateway,
)
from src.service.concert_ticketing.driving_adapter.background.maintenance_loop import (
    MaintenanceLoop,
)
from test.fake_midtrans import FakeMidtrans
from test.test_constants import BUYER, MAINTENANCE_RECONCILE, ORDER_BASE, TICKET_BASE, VIP_PRICE


async def _insert_paid_order(
    uow: SqlAlchemyUnitOfWork, catalog: dict[str, int], *, vip_qty: int
) -> Order:
    """A PAID order whose tickets were never issued (crash between commit and issuance)."""
    order = Order.create(
        user_id=BUYER.id,
        concert_id=catalog['concert_id'],
        items=[
            OrderItem(
                ticket_type_id=catalog['vip_id'],
                qty=vip_qty,
                unit_price=VIP_PRICE,
                subtotal=VIP_PRICE * vip_qty,
            )
        ],
        ttl_minutes=15,
    )
    async with uow:
        created = await uow.order_repo.create(order=order)
        await uow.order_repo.update_status(
            order=created.transition_to(OrderStatus.AWAITING_PAYMENT).transition_to(
                OrderStatus.PAID
            )
        )
        await uow.commit()
    return created


@pytest.mark.integration
class TestMaintenanceEndpoint:
    async def test_buyer_cannot_run_maintenance(
        self, client: httpx.AsyncClient, buyer_headers: dict[str, str]
    ) -> None:
        response = await client.post(MAINTENANCE_RECONCILE, headers=buyer_headers)
        assert response.status_code == 403

    async def test_expires_overdue_orders(
        self,
        client: httpx.AsyncClient,
        place_order,
        force_expiry,
        admin_headers: dict[str, str],
        buyer_headers: dict[str, str],
    ) -> None:
        overdue = await place_order()
        fresh = await place_order()
        await force_expiry(overdue['id'])

        response = await client.post(MAINTENANCE_RECONCILE, headers=admin_headers)

        assert response.status_code == 200
        assert response.json()['expired_orders'] == 1
        orders = {
            o['id']: o['status']
            for o in (await client.get(ORDER_BASE, headers=buyer_headers)).json()
        }
        assert orders == {overdue['id']: 'expired', fresh['id']: 'pending'}

    async def test_recovers_missing_issuance_once(
        self,
        client: httpx.AsyncClient,
        uow: SqlAlchemyUnitOfWork,
        catalog: dict[str, int],
        admin_headers: dict[str, str],
        buyer_headers: dict[str, str],
    ) -> None:
        """
        Given: PAID 訂單但沒有 issuance marker
        When: 連續執行兩次 sweep
        Then: 第一次補發 2 張票, 第二次不再發
        """
        order = await _insert_paid_order(uow, catalog, vip_qty=2)

        first = await client.post(MAINTENANCE_RECONCILE, headers=admin_headers)
        second = await client.post(MAINTENANCE_RECONCILE, headers=admin_headers)

        assert first.json()['recovered_orders'] == 1
        assert second.json()['recovered_orders'] == 0
        tickets = (await client.get(TICKET_BASE, headers=buyer_headers)).json()
        assert len(tickets) == 2
        assert {t['order_id'] for t in tickets} == {str(order.id)}

    async def test_oversold_order_reported_unfulfilled(
        self,
        client: httpx.AsyncClient,
        uow: SqlAlchemyUnitOfWork,
        catalog: dict[str, int],
        admin_headers: dict[str, str],
        buyer_headers: dict[str, str],
    ) -> None:
        await _insert_paid_order(uow, catalog, vip_qty=11)

        response = await client.post(MAINTENANCE_RECONCILE, headers=admin_headers)

        assert response.json()['unfulfilled_orders'] == 1
        assert response.json()['recovered_orders'] == 0
        assert (await client.get(TICKET_BASE, headers=buyer_headers)).json() == []
        async with uow:
            vip = (await uow.catalog_repo.get_ticket_types(ticket_type_ids=[catalog['vip_id']]))[0]
        assert vip.quota_sold == 0

    async def test_unfulfillable_orders_do_not_block_recovery(
        self,
        client: httpx.AsyncClient,
        uow: SqlAlchemyUnitOfWork,
        catalog: dict[str, int],
        payment_gateway: MidtransPaymentGateway,
        buyer_headers: dict[str, str],
    ) -> None:
        """
        Given: batch_size=1; 最早的 PAID 訂單要 11 張 VIP (quota 10), 之後一筆要 1 張
        When: sweep 執行兩次
        Then: 每次都回報超賣訂單, 後面那筆第一次就補發
        """
        await _insert_paid_order(uow, catalog, vip_qty=11)
        recoverable = await _insert_paid_order(uow, catalog, vip_qty=1)
        issuer = TicketIssuer()
        sweep = RunMaintenanceUseCase(
            uow=uow,
            payment_gateway=payment_gateway,
            settlement_reconciler=SettlementReconciler(ticket_issuer=issuer),
            ticket_issuer=issuer,
            batch_size=1,
        )

        first = await sweep.execute()
        second = await sweep.execute()

        assert (first.unfulfilled_orders, first.recovered_orders) == (1, 1)
        assert (second.unfulfilled_orders, second.recovered_orders) == (1, 0)
        tickets = (await client.get(TICKET_BASE, headers=buyer_headers)).json()
        assert [t['order_id'] for t in tickets] == [str(recoverable.id)]


@pytest.mark.integration
class TestStalePaymentSync:
    @pytest.fixture
    def sweep(
        self, uow: SqlAlchemyUnitOfWork, payment_gateway: MidtransPaymentGateway
    ) -> RunMaintenanceUseCase:
        issuer = TicketIssuer()
        return RunMaintenanceUseCase(
            uow=uow,
            payment_gateway=payment_gateway,
            settlement_reconciler=SettlementReconciler(ticket_issuer=issuer),
            ticket_issuer=issuer,
            batch_size=100,
            sync_after_minutes=0,
        )

    async def test_lost_webhook_settles_through_sweep(
        self,
        client: httpx.AsyncClient,
        fake_midtrans: FakeMidtrans,
        place_order,
        initiate_payment,
        sweep: RunMaintenanceUseCase,
        buyer_headers: dict[str, str],
    ) -> None:
        """
        Given: AWAITING_PAYMENT 訂單, Midtrans 已 settlement 但通知遺失
        When: sweep
        Then: 訂單 PAID 並發票
        """
        order: dict[str, Any] = await place_order()
        await initiate_payment(order['id'])
        fake_midtrans.set_status(
            order_id=order['external_order_ref'],
            gross_amount=order['gross_amount'],
            transaction_status='settlement',
        )

        report = await sweep.execute()

        assert report.synced_orders == 1
        assert report.sync_failures == 0
        read = (await client.get(f'{ORDER_BASE}/{order["id"]}', headers=buyer_headers)).json()
        assert read['status'] == 'paid'
        assert len((await client.get(TICKET_BASE, headers=buyer_headers)).json()) == 2

    async def test_gateway_outage_is_counted_not_raised(
        self,
        fake_midtrans: FakeMidtrans,
        place_order,
        initiate_payment,
        sweep: RunMaintenanceUseCase,
    ) -> None:
        order = await place_order()
        await initiate_payment(order['id'])
        fake_midtrans.raise_error = httpx.ConnectError('connection refused')

        report = await sweep.execute()

        assert report.sync_failures == 1
        assert report.synced_orders == 0

    async def test_bad_status_body_does_not_block_expiry(
        self,
        client: httpx.AsyncClient,
        fake_midtrans: FakeMidtrans,
        place_order,
        initiate_payment,
        force_expiry,
        sweep: RunMaintenanceUseCase,
        buyer_headers: dict[str, str],
    ) -> None:
        """
        Given: AWAITING_PAYMENT 訂單的 Core API 回傳 gross_amount 'n/a', 另一筆 PENDING 已過期
        When: sweep
        Then: 前者記為 sync_failure 並維持 awaiting_payment, 後者照常過期
        """
        stale = await place_order()
        await initiate_payment(stale['id'])
        fake_midtrans.set_status(
            order_id=stale['external_order_ref'],
            gross_amount=stale['gross_amount'],
            transaction_status='settlement',
        )
        fake_midtrans.statuses[stale['external_order_ref']]['gross_amount'] = 'n/a'
        overdue = await place_order()
        await force_expiry(overdue['id'])

        report = await sweep.execute()

        assert report.sync_failures == 1
        assert report.expired_orders == 1
        assert report.failed_sweeps == []
        orders = {
            o['id']: o['status']
            for o in (await client.get(ORDER_BASE, headers=buyer_headers)).json()
        }
        assert orders == {stale['id']: 'awaiting_payment', overdue['id']: 'expired'}


@pytest.mark.integration
class TestMaintenanceLoop:
    async def test_run_once_opens_its_own_session(
        self,
        place_order,
        force_expiry,
        payment_gateway: MidtransPaymentGateway,
    ) -> None:
        order = await place_order()
        await force_expiry(order['id'])
        issuer = TicketIssuer()
        loop = MaintenanceLoop(
            database=Database(),
            payment_gateway=payment_gateway,
            settlement_reconciler=SettlementReconciler(ticket_issuer=issuer),
            ticket_issuer=issuer,
            interval_seconds=3600,
        )

        report = await loop.run_once()

        assert report.expired_orders == 1
        assert report.recovered_orders == 0
