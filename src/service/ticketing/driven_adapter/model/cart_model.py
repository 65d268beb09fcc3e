from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base


_ACTIVE_CART = text("status IN ('OPEN', 'PENDING_PAYMENT')")


class CartModel(Base):
    __tablename__ = 'cart'
    __mapper_args__ = {'eager_defaults': True}
    __table_args__ = (
        # One current cart per client; PAID and CANCELED carts stay as history
        Index(
            'uq_cart_active_client',
            'client_id',
            unique=True,
            postgresql_where=_ACTIVE_CART,
            sqlite_where=_ACTIVE_CART,
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    client_id: Mapped[int] = mapped_column(
        Integer, ForeignKey('client.id', ondelete='CASCADE'), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default='OPEN')
    orders: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    total_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    coupon_claimed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    applied_coupon_name: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    applied_discount_factor: Mapped[Decimal] = mapped_column(
        Numeric(6, 4), nullable=False, default=1
    )
    total_price_with_discount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=0
    )
    checkout_attempt_id: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True, unique=True
    )
    checkout_started_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, index=True
    )
    settled_outcome: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
