from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base


class PaymentAttemptModel(Base):
    __tablename__ = 'payment_attempt'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # One settlement per checkout attempt, whatever the cart does afterwards
    checkout_attempt_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    cart_id: Mapped[int] = mapped_column(
        Integer, ForeignKey('cart.id', ondelete='CASCADE'), nullable=False, index=True
    )
    client_id: Mapped[int] = mapped_column(
        Integer, ForeignKey('client.id', ondelete='CASCADE'), nullable=False
    )
    outcome: Mapped[str] = mapped_column(String(20), nullable=False)
    settled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
