from datetime import datetime, timezone

from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import InsufficientInventoryError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.concert_ticketing.app.dto.settlement_ack import SettlementAck
from src.service.concert_ticketing.app.service.ticket_issuer import TicketIssuer
from src.service.concert_ticketing.domain.entity.order_entity import Order
from src.service.concert_ticketing.domain.entity.payment_entity import Payment
from src.service.concert_ticketing.domain.enum.order_status import OrderStatus
from src.service.concert_ticketing.domain.enum.payment_status import PaymentStatus
from src.service.concert_ticketing.domain.enum.settlement_outcome import SettlementOutcome
from src.service.concert_ticketing.domain.settlement_mapping import map_settlement
from src.service.concert_ticketing.domain.value_object.payment_report import (
    PaymentStatusReport,
)


class SettlementReconciler:
    """
    Settlement state machine: provider report -> Payment/Order state.

    Shared by the webhook, the per-order status sync and the maintenance
    sweep. Runs inside the caller's transaction; the caller commits.

    Idempotency comes from the forward-only transition table (a stale or
    replayed report finds no path and is ignored) plus the issuance marker
    (tickets are never issued twice), not from arrival order.
    """

    def __init__(self, *, ticket_issuer: TicketIssuer) -> None:
        self.ticket_issuer = ticket_issuer

    @staticmethod
    def _ack(
        report: PaymentStatusReport,
        outcome: SettlementOutcome,
        *,
        source: str,
        order: Order | None = None,
        payment: Payment | None = None,
        tickets_issued: int = 0,
    ) -> SettlementAck:
        metrics.settlement_notifications.labels(
            transaction_status=report.transaction_status, outcome=outcome.value
        ).inc()
        Logger.base.info(
            f'🧾 [SETTLEMENT:{source}] {report.order_ref} '
            f'{report.transaction_status}/{report.fraud_status or "-"} -> {outcome.value}'
        )
        return SettlementAck(
            outcome=outcome,
            order_ref=report.order_ref,
            order_status=order.status if order else None,
            payment_status=payment.status if payment else None,
            tickets_issued=tickets_issued,
        )

    @Logger.io
    async def reconcile(
        self, *, uow: AbstractUnitOfWork, report: PaymentStatusReport, source: str = 'webhook'
    ) -> SettlementAck:
        # Row lock: concurrent deliveries for one order are serialised here
        order = await uow.order_repo.get_by_external_ref(
            external_order_ref=report.order_ref, for_update=True
        )
        if order is None:
            Logger.base.warning(
                f'🔍 [SETTLEMENT:{source}] No order for {report.order_ref}; acknowledged '
                f'without state change. Payload: {report.raw}'
            )
            return self._ack(report, SettlementOutcome.ORDER_NOT_FOUND, source=source)

        # Audit trail is written whatever the outcome
        payment = await uow.payment_repo.get_by_order_id(order_id=order.id) or Payment.start(
            order_id=order.id, gateway_token=None, redirect_url=None
        )
        payment = payment.record_report(
            transaction_status=report.transaction_status,
            fraud_status=report.fraud_status,
            raw_payload=report.raw,
        )

        target = map_settlement(report.transaction_status, report.fraud_status)
        if target is None:
            payment = await uow.payment_repo.upsert(payment=payment)
            return self._ack(
                report,
                SettlementOutcome.UNRECOGNIZED_STATUS,
                source=source,
                order=order,
                payment=payment,
            )

        if not report.amount_matches(order.gross_amount):
            payment = await uow.payment_repo.upsert(payment=payment)
            Logger.base.error(
                f'🚨 [SETTLEMENT:{source}] Gross amount mismatch for {report.order_ref}: '
                f'reported {report.gross_amount}, order {order.gross_amount}. Not applied.'
            )
            return self._ack(
                report, SettlementOutcome.IGNORED, source=source, order=order, payment=payment
            )

        path = order.path_to(target.order_status)
        if path is None:
            payment = await uow.payment_repo.upsert(payment=payment)
            if target.order_status == OrderStatus.PAID:
                # Money captured for an order we already closed
                Logger.base.error(
                    f'🚨 [SETTLEMENT:{source}] {report.order_ref} captured while order is '
                    f'{order.status.value}; needs a manual refund'
                )
            else:
                Logger.base.warning(
                    f'⏭️ [SETTLEMENT:{source}] {report.order_ref}: no forward path '
                    f'{order.status.value} -> {target.order_status.value}, ignored'
                )
            return self._ack(
                report, SettlementOutcome.IGNORED, source=source, order=order, payment=payment
            )

        if not path:
            if payment.status == PaymentStatus.PENDING:
                payment = payment.with_status(target.payment_status)
            payment = await uow.payment_repo.upsert(payment=payment)
            return self._ack(
                report, SettlementOutcome.DUPLICATE, source=source, order=order, payment=payment
            )

        now = datetime.now(timezone.utc)
        for step in path:
            previous = order.status
            order = order.transition_to(step, now=now)
            metrics.order_transitions.labels(
                from_status=previous.value, to_status=step.value, source=source
            ).inc()
        await uow.order_repo.update_status(order=order)
        payment = await uow.payment_repo.upsert(payment=payment.with_status(target.payment_status))

        tickets_issued = 0
        if order.status == OrderStatus.PAID:
            try:
                tickets_issued = len(
                    await self.ticket_issuer.issue_for_order(uow=uow, order=order)
                )
            except InsufficientInventoryError as e:
                # Payment stays recorded; the recovery sweep keeps reporting the order
                metrics.issuance_failures.labels(reason='insufficient_inventory').inc()
                Logger.base.error(
                    f'🚨 [SETTLEMENT:{source}] {report.order_ref} is PAID but cannot be '
                    f'fulfilled: {e.message}'
                )
        elif order.status == OrderStatus.REFUNDED:
            voided = await uow.ticket_repo.void_issued_for_order(order_id=order.id)
            Logger.base.info(
                f'↩️ [SETTLEMENT:{source}] {report.order_ref} refunded, {voided} tickets voided'
            )

        return self._ack(
            report,
            SettlementOutcome.APPLIED,
            source=source,
            order=order,
            payment=payment,
            tickets_issued=tickets_issued,
        )
