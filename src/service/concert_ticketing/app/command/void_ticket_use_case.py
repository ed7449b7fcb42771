from datetime import datetime, timezone
from typing import Self

from fastapi import Depends

from src.platform.database.unit_of_work import AbstractUnitOfWork, get_unit_of_work
from src.platform.exception.exceptions import InvalidStateError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.concert_ticketing.domain.entity.ticket_entity import Ticket
from src.service.concert_ticketing.domain.enum.ticket_status import TicketStatus


class VoidTicketUseCase:
    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    def depends(cls, uow: AbstractUnitOfWork = Depends(get_unit_of_work)) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def execute(self, *, redemption_code: str) -> Ticket:
        """Admin voids an ISSUED ticket. USED and VOID are final."""
        async with self.uow:
            ticket = await self.uow.ticket_repo.transition_status(
                redemption_code=redemption_code,
                from_status=TicketStatus.ISSUED,
                to_status=TicketStatus.VOID,
                now=datetime.now(timezone.utc),
            )
            if ticket is None:
                current = await self.uow.ticket_repo.get_by_code(redemption_code=redemption_code)
                if current is None:
                    metrics.ticket_scans.labels(operation='void', result='not_found').inc()
                    raise NotFoundError('Ticket not found')
                metrics.ticket_scans.labels(operation='void', result='rejected').inc()
                raise InvalidStateError(f'Ticket already {current.status.value.upper()}')
            await self.uow.commit()

        metrics.ticket_scans.labels(operation='void', result='ok').inc()
        Logger.base.info(f'🗑️ [GATE] Ticket {ticket.id} voided')
        return ticket
