from decimal import Decimal
from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import ConflictError, DomainError, NotFoundError
from src.platform.exception.result import returns_result
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ordering_metrics import metrics
from src.platform.types.utc_datetime import utc_now
from src.service.ticketing.domain.entity.cart_entity import Cart
from src.service.ticketing.domain.value_object.money import to_money


class ReserveTicketsUseCase:
    """
    Move tickets from a locality into the client's cart.

    Flow (one transaction):
    1. Lock the client's cart row
    2. Check the event is open, the locality exists, the client saw the current price and
       enough places are left
    3. Atomically decrement the locality (and the event total)
    4. Merge the tickets into the cart at the locality's current price

    Any failure rolls the whole transaction back, so inventory and cart never diverge.
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
        self,
        *,
        client_id: int,
        event_id: int,
        locality_name: str,
        tickets_selected: int,
        expected_unit_price: Decimal,
    ) -> Cart:
        if tickets_selected < 1:
            raise DomainError('At least one ticket must be selected')

        with self.tracer.start_as_current_span(
            'use_case.reserve_tickets',
            attributes={
                'client.id': client_id,
                'event.id': event_id,
                'locality.name': locality_name,
                'tickets': tickets_selected,
            },
        ):
            async with self.uow:
                # The cart row is always locked first: one lock order for every engine operation
                cart = await self.uow.carts.get_by_client_id(client_id=client_id, for_update=True)

                event = await self.uow.events.get_by_id(event_id=event_id)
                if event is None:
                    raise NotFoundError(f'Event {event_id} not found', ErrorKind.EVENT_NOT_FOUND)
                event.validate_open_for_purchase(now=utc_now())

                locality = event.get_locality(locality_name)
                if to_money(expected_unit_price) != locality.price:
                    raise ConflictError(
                        f'Price of locality {locality_name} is now {locality.price}',
                        ErrorKind.PRICE_STALE,
                    )
                if locality.remaining_capacity < tickets_selected:
                    raise ConflictError(
                        f'Only {locality.remaining_capacity} tickets left in locality '
                        f'{locality_name}',
                        ErrorKind.INSUFFICIENT_CAPACITY,
                    )

                if cart is None:
                    raise NotFoundError(
                        f'Client {client_id} has no cart', ErrorKind.CART_NOT_FOUND
                    )
                cart.validate_open()

                await self.uow.events.adjust_locality_capacity(
                    event_id=event_id, locality_name=locality_name, delta=-tickets_selected
                )
                cart = cart.add_tickets(
                    event_id=event_id,
                    locality_name=locality_name,
                    tickets=tickets_selected,
                    unit_price=locality.price,
                )
                cart = await self.uow.carts.save(cart=cart)
                await self.uow.commit()

        metrics.tickets_reserved.inc(tickets_selected)
        Logger.base.info(
            f'🛒 [RESERVE] client={client_id} event={event_id} locality={locality_name} '
            f'tickets={tickets_selected} total={cart.total_price}'
        )
        return cart
