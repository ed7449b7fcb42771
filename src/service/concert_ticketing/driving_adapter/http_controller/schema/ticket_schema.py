from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from src.service.concert_ticketing.domain.entity.ticket_entity import Ticket


class TicketResponse(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'id': '01936d90-1a2b-7c4e-a9c5-123456789abc',
                'order_id': '01936d8f-5e73-7c4e-a9c5-123456789abc',
                'concert_id': 1,
                'ticket_type_id': 1,
                'redemption_code': 'TKT-MFRGGZDFMZTWQ2LKNNWG23TP',
                'status': 'issued',
                'issued_at': '2026-01-10T10:32:00Z',
                'used_at': None,
            }
        }
    )

    id: UUID
    order_id: UUID
    concert_id: int
    ticket_type_id: int
    redemption_code: str
    status: str
    issued_at: Optional[datetime] = None
    used_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, ticket: Ticket) -> 'TicketResponse':
        return cls(
            id=ticket.id,
            order_id=ticket.order_id,
            concert_id=ticket.concert_id,
            ticket_type_id=ticket.ticket_type_id,
            redemption_code=ticket.redemption_code,
            status=ticket.status.value,
            issued_at=ticket.issued_at,
            used_at=ticket.used_at,
        )
