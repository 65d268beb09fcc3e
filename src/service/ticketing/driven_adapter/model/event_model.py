from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.platform.database.orm_db_setting import Base


class EventModel(Base):
    __tablename__ = 'event'
    __mapper_args__ = {'eager_defaults': True}
    __table_args__ = (
        CheckConstraint('total_available_places >= 0', name='ck_event_places_non_negative'),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    city: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    address: Mapped[str] = mapped_column(String(255), nullable=False, default='')
    event_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    event_type: Mapped[str] = mapped_column(String(30), nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    available_for_purchase: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    total_available_places: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    localities: Mapped[List['LocalityModel']] = relationship(
        'LocalityModel',
        back_populates='event',
        cascade='all, delete-orphan',
        order_by='LocalityModel.position',
        lazy='selectin',
    )


class LocalityModel(Base):
    __tablename__ = 'locality'
    __table_args__ = (
        UniqueConstraint('event_id', 'name', name='uq_locality_event_name'),
        CheckConstraint('remaining_capacity >= 0', name='ck_locality_remaining_non_negative'),
        CheckConstraint(
            'remaining_capacity <= total_capacity', name='ck_locality_remaining_within_total'
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_id: Mapped[int] = mapped_column(
        Integer, ForeignKey('event.id', ondelete='CASCADE'), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    remaining_capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    event: Mapped['EventModel'] = relationship('EventModel', back_populates='localities')
