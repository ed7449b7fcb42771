from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from src.service.concert_ticketing.app.dto.settlement_ack import SettlementAck
from src.service.concert_ticketing.domain.entity.order_entity import Order
from src.service.concert_ticketing.domain.entity.payment_entity import Payment


class PaymentResponse(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'order_id': '01936d8f-5e73-7c4e-a9c5-123456789abc',
                'order_status': 'awaiting_payment',
                'gross_amount': 3250000,
                'provider': 'midtrans',
                'payment_status': 'pending',
                'token': '66e4fa55-fdac-4ef9-91b5-733b97d1b862',
                'redirect_url': 'https://app.sandbox.midtrans.com/snap/v4/redirection/66e4fa55',
                'last_transaction_status': None,
                'updated_at': '2026-01-10T10:31:00Z',
            }
        }
    )

    order_id: UUID
    order_status: str
    gross_amount: int
    provider: Optional[str] = None
    payment_status: Optional[str] = None
    token: Optional[str] = None
    redirect_url: Optional[str] = None
    last_transaction_status: Optional[str] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entities(cls, order: Order, payment: Optional[Payment]) -> 'PaymentResponse':
        return cls(
            order_id=order.id,
            order_status=order.status.value,
            gross_amount=order.gross_amount,
            provider=payment.provider.value if payment else None,
            payment_status=payment.status.value if payment else None,
            token=payment.gateway_token if payment else None,
            redirect_url=payment.redirect_url if payment else None,
            last_transaction_status=payment.last_transaction_status if payment else None,
            updated_at=payment.updated_at if payment else None,
        )


class SettlementAckResponse(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'outcome': 'applied',
                'order_ref': 'ORDER-01936d8f5e737c4ea9c5123456789abc',
                'order_status': 'paid',
                'payment_status': 'settled',
                'tickets_issued': 2,
            }
        }
    )

    outcome: str
    order_ref: str
    order_status: Optional[str] = None
    payment_status: Optional[str] = None
    tickets_issued: int = 0

    @classmethod
    def from_ack(cls, ack: SettlementAck) -> 'SettlementAckResponse':
        return cls(
            outcome=ack.outcome.value,
            order_ref=ack.order_ref,
            order_status=ack.order_status.value if ack.order_status else None,
            payment_status=ack.payment_status.value if ack.payment_status else None,
            tickets_issued=ack.tickets_issued,
        )
