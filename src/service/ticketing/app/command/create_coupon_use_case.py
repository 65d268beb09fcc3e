from datetime import datetime
from decimal import Decimal
from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import ConflictError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.domain.entity.coupon_entity import Coupon


class CreateCouponUseCase:
    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    @inject
    def depends(cls, uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work])) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def execute(
        self,
        *,
        name: str,
        discount_percent: Decimal,
        expiration_date: datetime,
        min_purchase_amount: Decimal,
    ) -> Coupon:
        coupon = Coupon.create(
            name=name,
            discount_percent=discount_percent,
            expiration_date=expiration_date,
            min_purchase_amount=min_purchase_amount,
        )
        async with self.uow:
            if await self.uow.coupons.get_by_name(name=coupon.name):
                raise ConflictError(
                    f'Coupon {coupon.name} already exists', ErrorKind.COUPON_ALREADY_EXISTS
                )
            coupon = await self.uow.coupons.create(coupon=coupon)
            await self.uow.commit()
        return coupon
