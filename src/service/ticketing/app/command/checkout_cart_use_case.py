from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
from uuid_utils import uuid7

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import (
    ConflictError,
    CustomBaseError,
    NotFoundError,
    PaymentGatewayError,
)
from src.platform.exception.result import returns_result
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import utc_now
from src.service.ticketing.app.dto.payment_dto import CheckoutItem, CheckoutResult, CheckoutSnapshot
from src.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ticketing.domain.entity.cart_entity import Cart
from src.service.ticketing.domain.enum.cart_status import CartStatus
from src.service.ticketing.domain.value_object.money import allocate, split_unit_prices


class CheckoutCartUseCase:
    """
    Hand the cart to the payment gateway.

    Flow:
    1. tx: lock the cart, re-check every order against the live locality price, move the
       cart to PENDING_PAYMENT under a fresh UUIDv7 checkout attempt id, commit
    2. call the gateway outside any transaction (bounded by the adapter timeout)
    3a. success -> tx: store the preference id on every order
    3b. failure -> tx: compensate back to OPEN, inventory stays reserved

    The cart is committed as PENDING_PAYMENT before the outbound call, so a crash during
    the call leaves a pending cart the reaper will eventually expire.
    """

    def __init__(self, *, uow: AbstractUnitOfWork, payment_gateway: IPaymentGateway) -> None:
        self.uow = uow
        self.payment_gateway = payment_gateway
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work]),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
    ) -> Self:
        return cls(uow=uow, payment_gateway=payment_gateway)

    @Logger.io
    @returns_result
    async def execute(self, *, client_id: int) -> CheckoutResult:
        checkout_attempt_id = str(uuid7())
        with self.tracer.start_as_current_span(
            'use_case.checkout_cart',
            attributes={'client.id': client_id, 'checkout.attempt_id': checkout_attempt_id},
        ):
            snapshot = await self._start_checkout(
                client_id=client_id, checkout_attempt_id=checkout_attempt_id
            )

            try:
                preference = await self.payment_gateway.create_preference(snapshot=snapshot)
            except Exception as e:
                await self._revert_checkout(checkout_attempt_id=checkout_attempt_id)
                if isinstance(e, CustomBaseError):
                    raise
                raise PaymentGatewayError(f'Payment gateway call failed: {e}') from e

            await self._attach_preference(
                checkout_attempt_id=checkout_attempt_id, preference_id=preference.preference_id
            )

        Logger.base.info(
            f'💳 [CHECKOUT] client={client_id} attempt={checkout_attempt_id} '
            f'preference={preference.preference_id} amount={snapshot.total_price_with_discount}'
        )
        return CheckoutResult(
            preference_id=preference.preference_id,
            checkout_attempt_id=checkout_attempt_id,
            init_point=preference.init_point,
        )

    async def _start_checkout(
        self, *, client_id: int, checkout_attempt_id: str
    ) -> CheckoutSnapshot:
        async with self.uow:
            cart = await self.uow.carts.get_by_client_id(client_id=client_id, for_update=True)
            if cart is None:
                raise NotFoundError(f'Client {client_id} has no cart', ErrorKind.CART_NOT_FOUND)
            cart.validate_open()
            cart.validate_not_empty()

            client = await self.uow.clients.get_by_id(client_id=client_id)
            if client is None:
                raise NotFoundError(f'Client {client_id} not found', ErrorKind.ACCOUNT_NOT_FOUND)

            items = await self._priced_items(cart)
            cart = cart.start_checkout(checkout_attempt_id=checkout_attempt_id, now=utc_now())
            cart = await self.uow.carts.save(cart=cart)
            await self.uow.commit()

        return CheckoutSnapshot(
            checkout_attempt_id=checkout_attempt_id,
            client_id=client_id,
            client_email=client.email,
            items=items,
            total_price=cart.total_price,
            total_price_with_discount=cart.total_price_with_discount,
            coupon_name=cart.applied_coupon_name,
        )

    async def _priced_items(self, cart: Cart) -> List[CheckoutItem]:
        """
        Fails PRICE_STALE (cart untouched) when any frozen price no longer matches.

        The discounted total is spread over the lines to the cent, so the items always add
        up to ``total_price_with_discount``; a line whose share does not divide evenly by
        its quantity is sent as two items one cent apart.
        """
        titles: List[str] = []
        for order in cart.orders:
            event = await self.uow.events.get_by_id(event_id=order.event_id)
            if event is None:
                raise NotFoundError(
                    f'Event {order.event_id} not found', ErrorKind.EVENT_NOT_FOUND
                )
            locality = event.get_locality(order.locality_name)
            if locality.price != order.unit_price:
                raise ConflictError(
                    f'Price of locality {order.locality_name} changed from {order.unit_price} '
                    f'to {locality.price}',
                    ErrorKind.PRICE_STALE,
                )
            titles.append(f'{event.name} - {locality.name}')

        line_totals = allocate(
            cart.total_price_with_discount, [order.subtotal for order in cart.orders]
        )
        items: List[CheckoutItem] = []
        for order, title, line_total in zip(cart.orders, titles, line_totals):
            for quantity, unit_price in split_unit_prices(line_total, order.tickets_selected):
                items.append(
                    CheckoutItem(
                        title=title,
                        event_id=order.event_id,
                        locality_name=order.locality_name,
                        quantity=quantity,
                        unit_price=unit_price,
                    )
                )
        return items

    async def _revert_checkout(self, *, checkout_attempt_id: str) -> None:
        async with self.uow:
            cart = await self.uow.carts.get_by_checkout_attempt_id(
                checkout_attempt_id=checkout_attempt_id, for_update=True
            )
            # Settled or expired in the meantime: nothing to compensate
            if cart is None or cart.status != CartStatus.PENDING_PAYMENT:
                return
            await self.uow.carts.save(cart=cart.revert_checkout())
            await self.uow.commit()
        Logger.base.warning(f'⚠️ [CHECKOUT] attempt={checkout_attempt_id} reverted to OPEN')

    async def _attach_preference(self, *, checkout_attempt_id: str, preference_id: str) -> None:
        async with self.uow:
            cart = await self.uow.carts.get_by_checkout_attempt_id(
                checkout_attempt_id=checkout_attempt_id, for_update=True
            )
            if cart is None or cart.status != CartStatus.PENDING_PAYMENT:
                return
            await self.uow.carts.save(cart=cart.attach_preference(preference_id=preference_id))
            await self.uow.commit()
