from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base
from src.platform.types.datetime_types import utc_now


class PaymentModel(Base):
    __tablename__ = 'payment'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey('orders.id', ondelete='CASCADE'), nullable=False, unique=True
    )
    provider: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    gateway_token: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    redirect_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    last_transaction_status: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    last_fraud_status: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    last_raw_notification: Mapped[Optional[dict[str, Any]]] = mapped_column(
        JSON().with_variant(JSONB(), 'postgresql'), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, server_default=func.now(), nullable=False
    )
