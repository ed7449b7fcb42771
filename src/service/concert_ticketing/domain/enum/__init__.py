"""Concert Ticketing Domain Enums"""

from src.service.concert_ticketing.domain.enum.order_status import OrderStatus
from src.service.concert_ticketing.domain.enum.payment_status import (
    PaymentProvider,
    PaymentStatus,
)
from src.service.concert_ticketing.domain.enum.settlement_outcome import SettlementOutcome
from src.service.concert_ticketing.domain.enum.ticket_status import TicketStatus

__all__ = [
    'OrderStatus',
    'PaymentProvider',
    'PaymentStatus',
    'SettlementOutcome',
    'TicketStatus',
]
