from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID

import attrs

from src.service.concert_ticketing.domain.enum.payment_status import (
    PaymentProvider,
    PaymentStatus,
)


@attrs.define
class Payment:
    """One per order. Keeps the last provider report verbatim for audit and replay."""

    order_id: UUID
    provider: PaymentProvider = PaymentProvider.MIDTRANS
    status: PaymentStatus = PaymentStatus.PENDING
    gateway_token: Optional[str] = None
    redirect_url: Optional[str] = None
    last_transaction_status: Optional[str] = None
    last_fraud_status: Optional[str] = None
    last_raw_notification: Optional[dict[str, Any]] = attrs.field(default=None, repr=False)
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def start(
        cls, *, order_id: UUID, gateway_token: Optional[str], redirect_url: Optional[str]
    ) -> 'Payment':
        now = datetime.now(timezone.utc)
        return cls(
            order_id=order_id,
            status=PaymentStatus.PENDING,
            gateway_token=gateway_token,
            redirect_url=redirect_url,
            created_at=now,
            updated_at=now,
        )

    def record_report(
        self,
        *,
        transaction_status: str,
        fraud_status: Optional[str],
        raw_payload: dict[str, Any],
    ) -> 'Payment':
        return attrs.evolve(
            self,
            last_transaction_status=transaction_status,
            last_fraud_status=fraud_status,
            last_raw_notification=raw_payload,
            updated_at=datetime.now(timezone.utc),
        )

    def with_status(self, status: PaymentStatus) -> 'Payment':
        return attrs.evolve(self, status=status, updated_at=datetime.now(timezone.utc))
