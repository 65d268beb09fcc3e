from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import NotFoundError
from src.platform.exception.result import returns_result
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ordering_metrics import metrics
from src.platform.types.utc_datetime import utc_now
from src.service.ticketing.app.dto.settlement_result import SettlementResult
from src.service.ticketing.domain.entity.cart_entity import Cart
from src.service.ticketing.domain.entity.payment_attempt_entity import PaymentAttempt
from src.service.ticketing.domain.entity.purchase_entity import Purchase
from src.service.ticketing.domain.enum.cart_status import CartStatus
from src.service.ticketing.domain.enum.payment_outcome import PaymentOutcome


class SettlePaymentUseCase:
    """
    Resolve a PENDING_PAYMENT cart with the gateway's outcome.

    - APPROVED: cart -> PAID, Purchase recorded, coupon consumed, fresh OPEN cart issued
    - REJECTED: cart -> OPEN, tickets stay reserved
    - EXPIRED:  cart -> OPEN, every order given back to inventory, coupon dropped

    Keyed by checkout attempt id through the payment attempt ledger: a repeated callback
    with the same outcome is a no-op reported as ``duplicate``, even after the cart has
    been checked out again under a newer attempt.
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
        self, *, checkout_attempt_id: str, outcome: PaymentOutcome
    ) -> SettlementResult:
        with self.tracer.start_as_current_span(
            'use_case.settle_payment',
            attributes={'checkout.attempt_id': checkout_attempt_id, 'payment.outcome': outcome},
        ):
            async with self.uow:
                settled = await self.uow.payment_attempts.get_by_checkout_attempt_id(
                    checkout_attempt_id=checkout_attempt_id
                )
                if settled is not None:
                    return await self._replay(settled, outcome=outcome)

                cart = await self.uow.carts.get_by_checkout_attempt_id(
                    checkout_attempt_id=checkout_attempt_id, for_update=True
                )
                if cart is None:
                    raise NotFoundError(
                        f'No cart for checkout attempt {checkout_attempt_id}',
                        ErrorKind.CHECKOUT_ATTEMPT_NOT_FOUND,
                    )
                if cart.status != CartStatus.PENDING_PAYMENT:
                    # Another callback may have settled it while we waited for the lock
                    settled = await self.uow.payment_attempts.get_by_checkout_attempt_id(
                        checkout_attempt_id=checkout_attempt_id
                    )
                    if settled is not None:
                        return await self._replay(settled, outcome=outcome)
                cart.validate_pending()

                await self.uow.payment_attempts.create(
                    attempt=PaymentAttempt.settle(cart=cart, outcome=outcome, now=utc_now())
                )
                if outcome == PaymentOutcome.APPROVED:
                    result = await self._approve(cart)
                elif outcome == PaymentOutcome.REJECTED:
                    result = SettlementResult(
                        checkout_attempt_id=checkout_attempt_id,
                        outcome=outcome,
                        cart=await self.uow.carts.save(cart=cart.reject_payment()),
                    )
                else:
                    result = await self._expire(cart)

                await self.uow.commit()

        metrics.record_settlement(outcome=outcome.value, duplicate=False)
        Logger.base.info(
            f'✅ [SETTLE] attempt={checkout_attempt_id} client={cart.client_id} outcome={outcome}'
        )
        return result

    async def _replay(
        self, settled: PaymentAttempt, *, outcome: PaymentOutcome
    ) -> SettlementResult:
        settled.validate_replay(outcome=outcome)
        cart = await self.uow.carts.get_by_id(cart_id=settled.cart_id)
        if cart is None:
            raise NotFoundError(f'Cart {settled.cart_id} not found', ErrorKind.CART_NOT_FOUND)
        Logger.base.info(
            f'🔁 [SETTLE] attempt={settled.checkout_attempt_id} already {outcome}, ignoring'
        )
        metrics.record_settlement(outcome=outcome.value, duplicate=True)
        return SettlementResult(
            checkout_attempt_id=settled.checkout_attempt_id,
            outcome=outcome,
            cart=cart,
            duplicate=True,
        )

    async def _approve(self, cart: Cart) -> SettlementResult:
        paid = await self.uow.carts.save(cart=cart.mark_paid())
        purchase = await self.uow.purchases.create(
            purchase=Purchase.from_cart(cart=paid, now=utc_now())
        )

        if paid.coupon_claimed and paid.applied_coupon_name:
            client = await self.uow.clients.get_by_id(client_id=paid.client_id)
            if client is not None:
                await self.uow.clients.update(
                    client=client.record_used_coupon(paid.applied_coupon_name)
                )
            await self.uow.coupons.mark_consumed(name=paid.applied_coupon_name)

        new_cart = await self.uow.carts.create(cart=Cart.open_for(client_id=paid.client_id))
        return SettlementResult(
            checkout_attempt_id=paid.checkout_attempt_id or '',
            outcome=PaymentOutcome.APPROVED,
            cart=paid,
            purchase=purchase,
            new_cart=new_cart,
        )

    async def _expire(self, cart: Cart) -> SettlementResult:
        released = 0
        for order in cart.orders:
            try:
                await self.uow.events.adjust_locality_capacity(
                    event_id=order.event_id,
                    locality_name=order.locality_name,
                    delta=order.tickets_selected,
                )
                released += order.tickets_selected
            except NotFoundError as e:
                Logger.base.warning(f'⚠️ [SETTLE] cannot release {order.locality_name}: {e}')
        metrics.tickets_released.labels(reason='expired').inc(released)

        expired = await self.uow.carts.save(cart=cart.expire_payment())
        return SettlementResult(
            checkout_attempt_id=cart.checkout_attempt_id or '',
            outcome=PaymentOutcome.EXPIRED,
            cart=expired,
        )
