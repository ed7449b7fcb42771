"""
Recovery sweeps

1. Gateway status reconciliation: AWAITING_PAYMENT orders idle for
   PAYMENT_STATUS_SYNC_AFTER_MINUTES are re-read from the provider, so a lost
   webhook settles before the expiry sweep closes the order
2. Expiry sweep: bulk PENDING/AWAITING_PAYMENT -> EXPIRED past expires_at
3. Issuance recovery: PAID orders without an issuance marker get their tickets.
   Pages through every such order on (paid_at, id), so orders that cannot be
   fulfilled never hide the ones behind them

Each order is handled in its own transaction; one bad order never blocks the
batch, and a failing sweep never skips the others. Every step is idempotent,
so overlapping runs are safe.
"""

from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Optional, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork, get_unit_of_work
from src.platform.exception.exceptions import CustomBaseError, InsufficientInventoryError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.concert_ticketing.app.dto.maintenance_report import MaintenanceReport
from src.service.concert_ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.concert_ticketing.app.service.settlement_reconciler import (
    SettlementReconciler,
)
from src.service.concert_ticketing.app.service.ticket_issuer import TicketIssuer
from src.service.concert_ticketing.domain.entity.order_entity import Order
from src.service.concert_ticketing.domain.enum.order_status import OrderStatus
from src.service.concert_ticketing.domain.enum.settlement_outcome import SettlementOutcome


class RunMaintenanceUseCase:
    def __init__(
        self,
        *,
        uow: AbstractUnitOfWork,
        payment_gateway: IPaymentGateway,
        settlement_reconciler: SettlementReconciler,
        ticket_issuer: TicketIssuer,
        batch_size: int = settings.MAINTENANCE_BATCH_SIZE,
        sync_after_minutes: int = settings.PAYMENT_STATUS_SYNC_AFTER_MINUTES,
    ) -> None:
        self.uow = uow
        self.payment_gateway = payment_gateway
        self.settlement_reconciler = settlement_reconciler
        self.ticket_issuer = ticket_issuer
        self.batch_size = batch_size
        self.sync_after_minutes = sync_after_minutes

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(get_unit_of_work),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
        settlement_reconciler: SettlementReconciler = Depends(
            Provide[Container.settlement_reconciler]
        ),
        ticket_issuer: TicketIssuer = Depends(Provide[Container.ticket_issuer]),
    ) -> Self:
        return cls(
            uow=uow,
            payment_gateway=payment_gateway,
            settlement_reconciler=settlement_reconciler,
            ticket_issuer=ticket_issuer,
        )

    async def _sync_one(self, order: Order) -> bool:
        status_report = await self.payment_gateway.query_status(order_ref=order.external_order_ref)
        if status_report is None:
            return False

        async with self.uow:
            ack = await self.settlement_reconciler.reconcile(
                uow=self.uow, report=status_report, source='sweep'
            )
            await self.uow.commit()
        return ack.outcome == SettlementOutcome.APPLIED

    @Logger.io
    async def sync_stale_payments(self, *, report: MaintenanceReport) -> None:
        before = datetime.now(timezone.utc) - timedelta(minutes=self.sync_after_minutes)
        async with self.uow:
            orders = await self.uow.order_repo.list_awaiting_payment_before(
                before=before, limit=self.batch_size
            )

        for order in orders:
            try:
                synced = await self._sync_one(order)
            except (CustomBaseError, SQLAlchemyError) as e:
                report.sync_failures += 1
                Logger.base.warning(
                    f'⚠️ [SWEEP] Status sync failed for {order.external_order_ref}: '
                    f'{getattr(e, "message", e)}'
                )
                continue
            if synced:
                report.synced_orders += 1

    @Logger.io
    async def expire_overdue_orders(self, *, report: MaintenanceReport) -> None:
        async with self.uow:
            expired_ids = await self.uow.order_repo.expire_overdue(
                now=datetime.now(timezone.utc), limit=self.batch_size
            )
            await self.uow.commit()
        report.expired_orders += len(expired_ids)

    async def _recover_one(self, order_id: UUID, report: MaintenanceReport) -> None:
        async with self.uow:
            order = await self.uow.order_repo.get_by_id(order_id=order_id, for_update=True)
            if order is None or order.status != OrderStatus.PAID:
                return
            try:
                tickets = await self.ticket_issuer.issue_for_order(uow=self.uow, order=order)
            except InsufficientInventoryError as e:
                report.unfulfilled_orders += 1
                metrics.issuance_failures.labels(reason='insufficient_inventory').inc()
                Logger.base.error(
                    f'🚨 [SWEEP] {order.external_order_ref} is PAID but cannot be '
                    f'fulfilled: {e.message}'
                )
                return
            await self.uow.commit()
        if tickets:
            report.recovered_orders += 1

    @Logger.io
    async def recover_ticket_issuance(self, *, report: MaintenanceReport) -> None:
        cursor: Optional[tuple[datetime, UUID]] = None
        while True:
            async with self.uow:
                page = await self.uow.order_repo.list_paid_without_issuance(
                    limit=self.batch_size, after=cursor
                )
            for _, order_id in page:
                await self._recover_one(order_id, report)
            if not page or len(page) < self.batch_size:
                return
            cursor = page[-1]

    @Logger.io
    async def execute(self) -> MaintenanceReport:
        report = MaintenanceReport()
        sweeps: list[tuple[str, Callable[..., Awaitable[None]]]] = [
            ('sync', self.sync_stale_payments),
            ('expire', self.expire_overdue_orders),
            ('recover', self.recover_ticket_issuance),
        ]
        for name, sweep in sweeps:
            try:
                await sweep(report=report)
            except Exception as e:
                report.failed_sweeps.append(name)
                Logger.base.exception(f'💥 [SWEEP] {name} sweep failed: {e}')

        if report != MaintenanceReport():
            Logger.base.info(f'🧹 [SWEEP] {report}')
        return report
