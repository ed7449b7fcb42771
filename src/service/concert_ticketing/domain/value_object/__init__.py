"""Concert Ticketing Value Objects"""

from src.service.concert_ticketing.domain.value_object.gateway_transaction import (
    GatewayLineItem,
    GatewayTransaction,
    GatewayTransactionRequest,
)
from src.service.concert_ticketing.domain.value_object.payment_report import (
    PaymentStatusReport,
)

__all__ = [
    'GatewayLineItem',
    'GatewayTransaction',
    'GatewayTransactionRequest',
    'PaymentStatusReport',
]
