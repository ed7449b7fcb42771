from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import exists, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.platform.types.datetime_types import ensure_utc
from src.service.concert_ticketing.app.interface.i_ticket_repo import ITicketRepo
from src.service.concert_ticketing.domain.entity.ticket_entity import Ticket
from src.service.concert_ticketing.domain.enum.ticket_status import TicketStatus
from src.service.concert_ticketing.driven_adapter.model.ticket_model import (
    TicketIssuanceModel,
    TicketModel,
)


class TicketRepoImpl(ITicketRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _to_entity(db_ticket: TicketModel) -> Ticket:
        return Ticket(
            id=db_ticket.id,
            order_id=db_ticket.order_id,
            user_id=db_ticket.user_id,
            concert_id=db_ticket.concert_id,
            ticket_type_id=db_ticket.ticket_type_id,
            redemption_code=db_ticket.redemption_code,
            status=TicketStatus(db_ticket.status),
            issued_at=ensure_utc(db_ticket.issued_at),
            used_at=ensure_utc(db_ticket.used_at),
        )

    async def _select(self, *condition) -> List[Ticket]:
        result = await self.session.execute(
            select(TicketModel)
            .where(*condition)
            .order_by(TicketModel.issued_at.desc(), TicketModel.id)
            .execution_options(populate_existing=True)
        )
        return [self._to_entity(db_ticket) for db_ticket in result.scalars().all()]

    @Logger.io
    async def has_issuance(self, *, order_id: UUID) -> bool:
        result = await self.session.execute(
            select(exists().where(TicketIssuanceModel.order_id == order_id))
        )
        return bool(result.scalar())

    @Logger.io
    async def create_issuance(self, *, order_id: UUID, ticket_count: int) -> None:
        self.session.add(TicketIssuanceModel(order_id=order_id, ticket_count=ticket_count))
        # Flush now so a duplicate marker fails before any ticket row is written
        await self.session.flush()

    @Logger.io
    async def create_many(self, *, tickets: List[Ticket]) -> List[Ticket]:
        self.session.add_all(
            [
                TicketModel(
                    id=ticket.id,
                    order_id=ticket.order_id,
                    user_id=ticket.user_id,
                    concert_id=ticket.concert_id,
                    ticket_type_id=ticket.ticket_type_id,
                    redemption_code=ticket.redemption_code,
                    status=ticket.status.value,
                    issued_at=ticket.issued_at,
                )
                for ticket in tickets
            ]
        )
        await self.session.flush()
        return tickets

    @Logger.io
    async def get_by_id(self, *, ticket_id: UUID) -> Optional[Ticket]:
        tickets = await self._select(TicketModel.id == ticket_id)
        return tickets[0] if tickets else None

    @Logger.io
    async def get_by_code(self, *, redemption_code: str) -> Optional[Ticket]:
        tickets = await self._select(TicketModel.redemption_code == redemption_code)
        return tickets[0] if tickets else None

    @Logger.io
    async def list_by_user(self, *, user_id: int) -> List[Ticket]:
        return await self._select(TicketModel.user_id == user_id)

    @Logger.io
    async def list_by_order(self, *, order_id: UUID) -> List[Ticket]:
        return await self._select(TicketModel.order_id == order_id)

    @Logger.io
    async def transition_status(
        self,
        *,
        redemption_code: str,
        from_status: TicketStatus,
        to_status: TicketStatus,
        now: datetime,
    ) -> Optional[Ticket]:
        values: dict = {'status': to_status.value}
        if to_status == TicketStatus.USED:
            values['used_at'] = now

        result = await self.session.execute(
            update(TicketModel)
            .where(
                TicketModel.redemption_code == redemption_code,
                TicketModel.status == from_status.value,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:  # type: ignore[attr-defined]
            return None
        return await self.get_by_code(redemption_code=redemption_code)

    @Logger.io
    async def void_issued_for_order(self, *, order_id: UUID) -> int:
        result = await self.session.execute(
            update(TicketModel)
            .where(
                TicketModel.order_id == order_id,
                TicketModel.status == TicketStatus.ISSUED.value,
            )
            .values(status=TicketStatus.VOID.value)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount  # type: ignore[attr-defined]
