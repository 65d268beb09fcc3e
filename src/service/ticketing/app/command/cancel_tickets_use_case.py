from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import DomainError, NotFoundError
from src.platform.exception.result import returns_result
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ordering_metrics import metrics
from src.service.ticketing.domain.entity.cart_entity import Cart


class CancelTicketsUseCase:
    """
    Give tickets back from the cart to the locality they were reserved from.

    Mirror of ReserveTicketsUseCase in one transaction. Emptying the cart also drops an
    applied coupon; the coupon was never consumed, so the client may use it again.
    """

    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(cls, uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work])) -> Self:
        return cls(uow=uow)

    @Logger.io
    @returns_result
    async def execute(
        self, *, client_id: int, event_id: int, locality_name: str, tickets_selected: int
    ) -> Cart:
        if tickets_selected < 1:
            raise DomainError('At least one ticket must be selected')

        with self.tracer.start_as_current_span(
            'use_case.cancel_tickets',
            attributes={
                'client.id': client_id,
                'event.id': event_id,
                'locality.name': locality_name,
                'tickets': tickets_selected,
            },
        ):
            async with self.uow:
                cart = await self.uow.carts.get_by_client_id(client_id=client_id, for_update=True)
                if cart is None:
                    raise NotFoundError(
                        f'Client {client_id} has no cart', ErrorKind.CART_NOT_FOUND
                    )

                cart = cart.remove_tickets(
                    event_id=event_id, locality_name=locality_name, tickets=tickets_selected
                )
                # Raises EVENT_NOT_FOUND / LOCALITY_NOT_FOUND when the event is gone
                await self.uow.events.adjust_locality_capacity(
                    event_id=event_id, locality_name=locality_name, delta=tickets_selected
                )
                cart = await self.uow.carts.save(cart=cart)
                await self.uow.commit()

        metrics.tickets_released.labels(reason='cancel').inc(tickets_selected)
        Logger.base.info(
            f'↩️ [CANCEL] client={client_id} event={event_id} locality={locality_name} '
            f'tickets={tickets_selected} total={cart.total_price}'
        )
        return cart
