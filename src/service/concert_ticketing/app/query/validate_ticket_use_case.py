from typing import Self

from fastapi import Depends

from src.platform.database.unit_of_work import AbstractUnitOfWork, get_unit_of_work
from src.platform.exception.exceptions import InvalidStateError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.concert_ticketing.domain.entity.ticket_entity import Ticket
from src.service.concert_ticketing.domain.enum.ticket_status import TicketStatus


class ValidateTicketUseCase:
    """Gate pre-check by redemption code. Read-only."""

    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    def depends(cls, uow: AbstractUnitOfWork = Depends(get_unit_of_work)) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def execute(self, *, redemption_code: str) -> Ticket:
        async with self.uow:
            ticket = await self.uow.ticket_repo.get_by_code(redemption_code=redemption_code)
        if ticket is None:
            metrics.ticket_scans.labels(operation='validate', result='not_found').inc()
            raise NotFoundError('Ticket not found')
        if ticket.status != TicketStatus.ISSUED:
            metrics.ticket_scans.labels(operation='validate', result='rejected').inc()
            raise InvalidStateError(f'Ticket is {ticket.status.value.upper()}')
        metrics.ticket_scans.labels(operation='validate', result='ok').inc()
        return ticket
