from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger


class DeleteCouponUseCase:
    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    @inject
    def depends(cls, uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work])) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def execute(self, *, coupon_id: int) -> None:
        async with self.uow:
            if not await self.uow.coupons.delete(coupon_id=coupon_id):
                raise NotFoundError(f'Coupon {coupon_id} not found', ErrorKind.COUPON_NOT_FOUND)
            await self.uow.commit()

    @Logger.io
    async def execute_all(self) -> int:
        async with self.uow:
            deleted = await self.uow.coupons.delete_all()
            await self.uow.commit()
        Logger.base.info(f'🗑️ [COUPON] Deleted {deleted} coupons')
        return deleted
