from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import NotFoundError
from src.platform.exception.result import returns_result
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.domain.entity.cart_entity import Cart


class RemoveCouponUseCase:
    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    @inject
    def depends(cls, uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work])) -> Self:
        return cls(uow=uow)

    @Logger.io
    @returns_result
    async def execute(self, *, client_id: int) -> Cart:
        async with self.uow:
            cart = await self.uow.carts.get_by_client_id(client_id=client_id, for_update=True)
            if cart is None:
                raise NotFoundError(f'Client {client_id} has no cart', ErrorKind.CART_NOT_FOUND)
            cart = await self.uow.carts.save(cart=cart.remove_coupon())
            await self.uow.commit()
        return cart
