from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import BigInteger, DateTime, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base
from src.platform.types.datetime_types import utc_now


class OrderModel(Base):
    __tablename__ = 'orders'  # "order" is reserved

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)  # UUID7
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    concert_id: Mapped[int] = mapped_column(
        Integer, ForeignKey('concert.id'), nullable=False, index=True
    )
    external_order_ref: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    gross_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, server_default=func.now(), nullable=False
    )
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    items: Mapped[List['OrderItemModel']] = relationship(
        back_populates='order',
        cascade='all, delete-orphan',
        lazy='selectin',
        order_by='OrderItemModel.id',
    )


class OrderItemModel(Base):
    __tablename__ = 'order_item'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey('orders.id', ondelete='CASCADE'), nullable=False, index=True
    )
    ticket_type_id: Mapped[int] = mapped_column(
        Integer, ForeignKey('ticket_type.id'), nullable=False
    )
    qty: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[int] = mapped_column(BigInteger, nullable=False)
    subtotal: Mapped[int] = mapped_column(BigInteger, nullable=False)

    order: Mapped['OrderModel'] = relationship(back_populates='items')
