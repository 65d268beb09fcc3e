from datetime import datetime
from decimal import Decimal
from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.domain.entity.coupon_entity import Coupon


class UpdateCouponUseCase:
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
        coupon_id: int,
        discount_percent: Decimal,
        expiration_date: datetime,
        min_purchase_amount: Decimal,
    ) -> Coupon:
        async with self.uow:
            coupon = await self.uow.coupons.get_by_id(coupon_id=coupon_id)
            if coupon is None:
                raise NotFoundError(f'Coupon {coupon_id} not found', ErrorKind.COUPON_NOT_FOUND)
            coupon = await self.uow.coupons.update(
                coupon=coupon.revise(
                    discount_percent=discount_percent,
                    expiration_date=expiration_date,
                    min_purchase_amount=min_purchase_amount,
                )
            )
            await self.uow.commit()
        return coupon
