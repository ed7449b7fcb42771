from abc import ABC, abstractmethod
from typing import Optional

from src.service.concert_ticketing.domain.value_object.gateway_transaction import (
    GatewayTransaction,
    GatewayTransactionRequest,
)
from src.service.concert_ticketing.domain.value_object.payment_report import (
    PaymentStatusReport,
)


class IPaymentGateway(ABC):
    """
    Boundary to the external payment provider

    Implementations raise GatewayUnavailableError for timeouts, transport
    errors and 5xx answers, GatewayRejectedError for 4xx answers.
    """

    @abstractmethod
    async def create_transaction(self, *, request: GatewayTransactionRequest) -> GatewayTransaction:
        pass

    @abstractmethod
    async def query_status(self, *, order_ref: str) -> Optional[PaymentStatusReport]:
        """None when the provider has no transaction for this reference"""
        pass

    @abstractmethod
    def verify_notification(self, *, report: PaymentStatusReport) -> bool:
        pass
