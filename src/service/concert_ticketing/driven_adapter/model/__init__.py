"""
Database Models

Import all models here to ensure they are registered with SQLAlchemy
"""

from src.service.concert_ticketing.driven_adapter.model.concert_model import (
    ConcertModel,
    TicketTypeModel,
)
from src.service.concert_ticketing.driven_adapter.model.order_model import (
    OrderItemModel,
    OrderModel,
)
from src.service.concert_ticketing.driven_adapter.model.payment_model import PaymentModel
from src.service.concert_ticketing.driven_adapter.model.ticket_model import (
    TicketIssuanceModel,
    TicketModel,
)

__all__ = [
    'ConcertModel',
    'OrderItemModel',
    'OrderModel',
    'PaymentModel',
    'TicketIssuanceModel',
    'TicketModel',
    'TicketTypeModel',
]
