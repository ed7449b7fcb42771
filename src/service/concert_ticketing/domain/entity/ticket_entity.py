import base64
from datetime import datetime, timezone
import secrets
from typing import Optional
from uuid import UUID

import attrs
from uuid_utils.compat import uuid7

from src.service.concert_ticketing.domain.enum.ticket_status import TicketStatus


# 15 random bytes = 120 bits, base32 without padding = 24 characters
REDEMPTION_CODE_BYTES = 15


def generate_redemption_code(prefix: str = 'TKT-') -> str:
    token = base64.b32encode(secrets.token_bytes(REDEMPTION_CODE_BYTES)).decode('ascii')
    return f'{prefix}{token.rstrip("=")}'


@attrs.define
class Ticket:
    id: UUID
    order_id: UUID
    user_id: int
    concert_id: int
    ticket_type_id: int
    redemption_code: str
    status: TicketStatus = TicketStatus.ISSUED
    issued_at: Optional[datetime] = None
    used_at: Optional[datetime] = None

    @classmethod
    def issue(
        cls,
        *,
        order_id: UUID,
        user_id: int,
        concert_id: int,
        ticket_type_id: int,
        code_prefix: str = 'TKT-',
        now: Optional[datetime] = None,
    ) -> 'Ticket':
        return cls(
            id=uuid7(),
            order_id=order_id,
            user_id=user_id,
            concert_id=concert_id,
            ticket_type_id=ticket_type_id,
            redemption_code=generate_redemption_code(code_prefix),
            status=TicketStatus.ISSUED,
            issued_at=now or datetime.now(timezone.utc),
        )

    @property
    def is_valid(self) -> bool:
        return self.status == TicketStatus.ISSUED
