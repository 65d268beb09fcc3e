from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.domain.entity.coupon_entity import Coupon


class ListCouponsUseCase:
    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    @inject
    def depends(cls, uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work])) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def list_all(self) -> List[Coupon]:
        async with self.uow:
            coupons = await self.uow.coupons.list_all()
        Logger.base.info(f'🎟️ [LIST_COUPONS] Found {len(coupons)} coupons')
        return coupons
