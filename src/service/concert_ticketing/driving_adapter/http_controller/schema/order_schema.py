from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.service.concert_ticketing.domain.entity.order_entity import Order


class OrderItemRequest(BaseModel):
    ticket_type_id: int
    qty: int = Field(ge=1)


class OrderCreateRequest(BaseModel):
    concert_id: int
    items: List[OrderItemRequest]

    class Config:
        json_schema_extra = {
            'example': {
                'concert_id': 1,
                'items': [
                    {'ticket_type_id': 1, 'qty': 1},
                    {'ticket_type_id': 2, 'qty': 1},
                ],
            }
        }


class OrderItemResponse(BaseModel):
    ticket_type_id: int
    qty: int
    unit_price: int
    subtotal: int


class OrderResponse(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'id': '01936d8f-5e73-7c4e-a9c5-123456789abc',  # UUID7
                'user_id': 2,
                'concert_id': 1,
                'external_order_ref': 'ORDER-01936d8f5e737c4ea9c5123456789abc',
                'gross_amount': 3250000,
                'status': 'pending',
                'expires_at': '2026-01-10T10:45:00Z',
                'created_at': '2026-01-10T10:30:00Z',
                'paid_at': None,
                'items': [
                    {'ticket_type_id': 1, 'qty': 1, 'unit_price': 2500000, 'subtotal': 2500000},
                    {'ticket_type_id': 2, 'qty': 1, 'unit_price': 750000, 'subtotal': 750000},
                ],
            }
        }
    )

    id: UUID
    user_id: int
    concert_id: int
    external_order_ref: str
    gross_amount: int
    status: str
    expires_at: datetime
    created_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    items: List[OrderItemResponse]

    @classmethod
    def from_entity(cls, order: Order) -> 'OrderResponse':
        return cls(
            id=order.id,
            user_id=order.user_id,
            concert_id=order.concert_id,
            external_order_ref=order.external_order_ref,
            gross_amount=order.gross_amount,
            status=order.status.value,
            expires_at=order.expires_at,
            created_at=order.created_at,
            paid_at=order.paid_at,
            items=[
                OrderItemResponse(
                    ticket_type_id=item.ticket_type_id,
                    qty=item.qty,
                    unit_price=item.unit_price,
                    subtotal=item.subtotal,
                )
                for item in order.items
            ],
        )
