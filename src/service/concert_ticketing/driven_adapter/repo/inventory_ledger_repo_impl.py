from typing import List

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.concert_ticketing.app.interface.i_inventory_ledger_repo import (
    IInventoryLedgerRepo,
)
from src.service.concert_ticketing.domain.entity.concert_entity import TicketType
from src.service.concert_ticketing.driven_adapter.model.concert_model import TicketTypeModel
from src.service.concert_ticketing.driven_adapter.repo.catalog_repo_impl import (
    ticket_type_to_entity,
)


class InventoryLedgerRepoImpl(IInventoryLedgerRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @Logger.io
    async def lock_ticket_types(self, *, ticket_type_ids: List[int]) -> List[TicketType]:
        if not ticket_type_ids:
            return []
        result = await self.session.execute(
            select(TicketTypeModel)
            .where(TicketTypeModel.id.in_(sorted(set(ticket_type_ids))))
            .order_by(TicketTypeModel.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return [ticket_type_to_entity(row) for row in result.scalars().all()]

    @Logger.io
    async def increment_sold(self, *, ticket_type_id: int, qty: int) -> bool:
        # The WHERE clause is the oversell guard; the CHECK constraint backs it up
        result = await self.session.execute(
            update(TicketTypeModel)
            .where(
                TicketTypeModel.id == ticket_type_id,
                TicketTypeModel.quota_sold + qty <= TicketTypeModel.quota_total,
            )
            .values(quota_sold=TicketTypeModel.quota_sold + qty)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1  # type: ignore[attr-defined]
