from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base
from src.platform.types.datetime_types import utc_now


class TicketIssuanceModel(Base):
    """Issuance marker: one row per order that received its ticket batch."""

    __tablename__ = 'ticket_issuance'

    order_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey('orders.id'), primary_key=True, autoincrement=False
    )
    ticket_count: Mapped[int] = mapped_column(Integer, nullable=False)
    issued_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, server_default=func.now(), nullable=False
    )


class TicketModel(Base):
    __tablename__ = 'ticket'

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)  # UUID7
    order_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey('orders.id'), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    concert_id: Mapped[int] = mapped_column(Integer, ForeignKey('concert.id'), nullable=False)
    ticket_type_id: Mapped[int] = mapped_column(
        Integer, ForeignKey('ticket_type.id'), nullable=False
    )
    redemption_code: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    issued_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, server_default=func.now(), nullable=False
    )
    used_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
