from typing import Optional

import attrs

from src.service.concert_ticketing.domain.enum.order_status import OrderStatus
from src.service.concert_ticketing.domain.enum.payment_status import PaymentStatus
from src.service.concert_ticketing.domain.enum.settlement_outcome import SettlementOutcome


@attrs.frozen
class SettlementAck:
    outcome: SettlementOutcome
    order_ref: str
    order_status: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None
    tickets_issued: int = 0
