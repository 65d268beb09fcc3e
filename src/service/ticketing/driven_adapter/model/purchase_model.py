from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base


class PurchaseModel(Base):
    __tablename__ = 'purchase'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    client_id: Mapped[int] = mapped_column(
        Integer, ForeignKey('client.id', ondelete='CASCADE'), nullable=False, index=True
    )
    cart_id: Mapped[int] = mapped_column(Integer, ForeignKey('cart.id'), nullable=False)
    # A settlement is recorded at most once per checkout attempt
    checkout_attempt_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    orders: Mapped[list] = mapped_column(JSON, nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_price_with_discount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    coupon_name: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    purchased_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
