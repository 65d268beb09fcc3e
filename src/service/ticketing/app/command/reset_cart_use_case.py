from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.domain.entity.cart_entity import Cart


class ResetCartUseCase:
    """
    Admin reset: the client's current cart becomes CANCELED, its tickets go back to
    inventory and a fresh OPEN cart is issued.
    """

    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    @inject
    def depends(cls, uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work])) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def execute(self, *, client_id: int) -> Cart:
        async with self.uow:
            cart = await self.uow.carts.get_by_client_id(client_id=client_id, for_update=True)
            if cart is None:
                raise NotFoundError(f'Client {client_id} has no cart', ErrorKind.CART_NOT_FOUND)
            canceled = cart.cancel_by_admin()

            for order in cart.orders:
                try:
                    await self.uow.events.adjust_locality_capacity(
                        event_id=order.event_id,
                        locality_name=order.locality_name,
                        delta=order.tickets_selected,
                    )
                except NotFoundError as e:
                    Logger.base.warning(f'⚠️ [RESET] cannot release {order.locality_name}: {e}')

            await self.uow.carts.save(cart=canceled)
            new_cart = await self.uow.carts.create(cart=Cart.open_for(client_id=client_id))
            await self.uow.commit()

        Logger.base.info(f'🧹 [RESET] client={client_id} cart {cart.id} canceled')
        return new_cart
