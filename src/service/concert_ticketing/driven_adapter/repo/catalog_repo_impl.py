from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.platform.types.datetime_types import ensure_utc
from src.service.concert_ticketing.app.interface.i_catalog_repo import ICatalogRepo
from src.service.concert_ticketing.domain.entity.concert_entity import Concert, TicketType
from src.service.concert_ticketing.driven_adapter.model.concert_model import (
    ConcertModel,
    TicketTypeModel,
)


def ticket_type_to_entity(db_ticket_type: TicketTypeModel) -> TicketType:
    return TicketType(
        id=db_ticket_type.id,
        concert_id=db_ticket_type.concert_id,
        name=db_ticket_type.name,
        price=db_ticket_type.price,
        quota_total=db_ticket_type.quota_total,
        quota_sold=db_ticket_type.quota_sold,
        sales_start_at=ensure_utc(db_ticket_type.sales_start_at),
        sales_end_at=ensure_utc(db_ticket_type.sales_end_at),
    )


class CatalogRepoImpl(ICatalogRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @Logger.io
    async def get_concert(self, *, concert_id: int) -> Optional[Concert]:
        result = await self.session.execute(
            select(ConcertModel).where(ConcertModel.id == concert_id)
        )
        db_concert = result.scalar_one_or_none()
        if not db_concert:
            return None
        return Concert(
            id=db_concert.id,
            title=db_concert.title,
            venue=db_concert.venue,
            starts_at=ensure_utc(db_concert.starts_at),
        )

    @Logger.io
    async def get_ticket_types(self, *, ticket_type_ids: List[int]) -> List[TicketType]:
        if not ticket_type_ids:
            return []
        result = await self.session.execute(
            select(TicketTypeModel)
            .where(TicketTypeModel.id.in_(ticket_type_ids))
            .order_by(TicketTypeModel.id)
            .execution_options(populate_existing=True)
        )
        return [ticket_type_to_entity(row) for row in result.scalars().all()]
