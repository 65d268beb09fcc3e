from datetime import timedelta
from typing import Dict, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import utc_now
from src.service.ticketing.app.dto.cart_view import CartView


class GetCartUseCase:
    """
    Current cart of a client.

    Orders for events starting within the purchase cutoff window, or for events that no
    longer exist, are left out of ``visible_orders``. The cart itself and its totals are
    returned untouched.
    """

    def __init__(self, *, uow: AbstractUnitOfWork, cutoff: timedelta | None = None) -> None:
        self.uow = uow
        self.cutoff = (
            cutoff if cutoff is not None else timedelta(days=settings.EVENT_PURCHASE_CUTOFF_DAYS)
        )

    @classmethod
    @inject
    def depends(cls, uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work])) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def get_for_client(self, *, client_id: int) -> CartView:
        async with self.uow:
            cart = await self.uow.carts.get_by_client_id(client_id=client_id)
            if cart is None:
                raise NotFoundError(f'Client {client_id} has no cart', ErrorKind.CART_NOT_FOUND)

            visible_by_event: Dict[int, bool] = {}
            limit = utc_now() + self.cutoff
            for event_id in {order.event_id for order in cart.orders}:
                event = await self.uow.events.get_by_id(event_id=event_id)
                visible_by_event[event_id] = event is not None and event.event_date > limit

        return CartView(
            cart=cart,
            visible_orders=tuple(o for o in cart.orders if visible_by_event[o.event_id]),
        )
