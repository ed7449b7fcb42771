from datetime import datetime
from typing import List, Optional

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.platform.database.orm_db_setting import Base


class ConcertModel(Base):
    __tablename__ = 'concert'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    venue: Mapped[str] = mapped_column(String(255), nullable=False, default='')
    starts_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    ticket_types: Mapped[List['TicketTypeModel']] = relationship(
        back_populates='concert', lazy='noload'
    )


class TicketTypeModel(Base):
    __tablename__ = 'ticket_type'
    __table_args__ = (
        CheckConstraint(
            'quota_sold >= 0 AND quota_sold <= quota_total', name='ck_ticket_type_quota'
        ),
        CheckConstraint('price >= 0', name='ck_ticket_type_price'),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    concert_id: Mapped[int] = mapped_column(
        Integer, ForeignKey('concert.id', ondelete='CASCADE'), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    price: Mapped[int] = mapped_column(BigInteger, nullable=False)
    quota_total: Mapped[int] = mapped_column(Integer, nullable=False)
    quota_sold: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    sales_start_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    sales_end_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    concert: Mapped['ConcertModel'] = relationship(back_populates='ticket_types', lazy='noload')
