"""
Provider transaction status -> (Payment status, Order status)

| provider status       | fraud verdict   | Payment   | Order            |
|-----------------------|-----------------|-----------|------------------|
| capture / settlement  | accept / absent | SETTLED   | PAID             |
| capture / settlement  | other           | FAILED    | CANCELLED        |
| pending               | -               | PENDING   | AWAITING_PAYMENT |
| deny / cancel         | -               | CANCELLED | CANCELLED        |
| expire                | -               | EXPIRED   | EXPIRED          |
| refund                | -               | CANCELLED | REFUNDED         |
"""

from typing import Optional

import attrs

from src.service.concert_ticketing.domain.enum.order_status import OrderStatus
from src.service.concert_ticketing.domain.enum.payment_status import PaymentStatus


@attrs.frozen
class SettlementTarget:
    payment_status: PaymentStatus
    order_status: OrderStatus


_CAPTURED = frozenset({'capture', 'settlement'})
_ACCEPTED_FRAUD_VERDICTS = frozenset({'accept', ''})

_STATUS_TARGETS: dict[str, SettlementTarget] = {
    'pending': SettlementTarget(PaymentStatus.PENDING, OrderStatus.AWAITING_PAYMENT),
    'deny': SettlementTarget(PaymentStatus.CANCELLED, OrderStatus.CANCELLED),
    'cancel': SettlementTarget(PaymentStatus.CANCELLED, OrderStatus.CANCELLED),
    'expire': SettlementTarget(PaymentStatus.EXPIRED, OrderStatus.EXPIRED),
    'refund': SettlementTarget(PaymentStatus.CANCELLED, OrderStatus.REFUNDED),
}


def map_settlement(
    transaction_status: str, fraud_status: Optional[str] = None
) -> Optional[SettlementTarget]:
    """None for statuses with no state-machine meaning (authorize, partial_refund, ...)."""
    status = transaction_status.strip().lower()
    if status in _CAPTURED:
        verdict = (fraud_status or '').strip().lower()
        if verdict in _ACCEPTED_FRAUD_VERDICTS:
            return SettlementTarget(PaymentStatus.SETTLED, OrderStatus.PAID)
        return SettlementTarget(PaymentStatus.FAILED, OrderStatus.CANCELLED)
    return _STATUS_TARGETS.get(status)
