from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import NotFoundError
from src.platform.exception.result import returns_result
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import utc_now
from src.service.ticketing.domain.entity.cart_entity import Cart


class ApplyCouponUseCase:
    """
    Reserve a coupon on the cart.

    Checks run in a fixed order so the reported error is deterministic:
    empty cart, coupon already applied, unknown coupon, expired, already used by this
    client, minimum purchase. The coupon is only consumed when the payment is approved.
    """

    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    @inject
    def depends(cls, uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work])) -> Self:
        return cls(uow=uow)

    @Logger.io
    @returns_result
    async def execute(self, *, client_id: int, coupon_name: str) -> Cart:
        coupon_name = coupon_name.strip()
        async with self.uow:
            cart = await self.uow.carts.get_by_client_id(client_id=client_id, for_update=True)
            if cart is None:
                raise NotFoundError(f'Client {client_id} has no cart', ErrorKind.CART_NOT_FOUND)
            cart.validate_can_claim_coupon()

            coupon = await self.uow.coupons.get_by_name(name=coupon_name)
            if coupon is None:
                raise NotFoundError(
                    f'Coupon {coupon_name} not found', ErrorKind.COUPON_NOT_FOUND
                )
            coupon.validate_not_expired(now=utc_now())

            client = await self.uow.clients.get_by_id(client_id=client_id)
            if client is None:
                raise NotFoundError(
                    f'Client {client_id} not found', ErrorKind.ACCOUNT_NOT_FOUND
                )
            client.validate_coupon_unused(coupon.name)
            coupon.validate_minimum_met(total_price=cart.total_price)

            cart = cart.apply_coupon(
                coupon_name=coupon.name, discount_factor=coupon.discount_factor
            )
            cart = await self.uow.carts.save(cart=cart)
            await self.uow.commit()

        Logger.base.info(
            f'🏷️ [COUPON] client={client_id} applied {coupon_name}: '
            f'{cart.total_price} -> {cart.total_price_with_discount}'
        )
        return cart
