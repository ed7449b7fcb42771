from typing import List, Self
from uuid import UUID

from fastapi import Depends

from src.platform.database.unit_of_work import AbstractUnitOfWork, get_unit_of_work
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.concert_ticketing.domain.entity.ticket_entity import Ticket


class ListTicketsUseCase:
    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    def depends(cls, uow: AbstractUnitOfWork = Depends(get_unit_of_work)) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def list_user_tickets(self, *, user_id: int) -> List[Ticket]:
        async with self.uow:
            return await self.uow.ticket_repo.list_by_user(user_id=user_id)

    @Logger.io
    async def get_user_ticket(self, *, ticket_id: UUID, user_id: int) -> Ticket:
        async with self.uow:
            ticket = await self.uow.ticket_repo.get_by_id(ticket_id=ticket_id)
        if ticket is None or ticket.user_id != user_id:
            raise NotFoundError('Ticket not found')
        return ticket
