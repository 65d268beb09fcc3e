"""
Cart aggregate

A client owns exactly one current cart (OPEN or PENDING_PAYMENT). Every mutation returns
a new Cart through ``attrs.evolve`` with totals recomputed from the orders, so a cart
handed out by this module always satisfies ``total_price == sum(order.subtotal)``.

Lifecycle:
    OPEN --start_checkout--> PENDING_PAYMENT --mark_paid--> PAID
                                   |--reject_payment--> OPEN (orders kept)
                                   |--expire_payment--> OPEN (orders released)
    OPEN / PENDING_PAYMENT --cancel_by_admin--> CANCELED
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

import attrs

from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import ConflictError, DomainError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.domain.enum.cart_status import CartStatus
from src.service.ticketing.domain.enum.payment_outcome import PaymentOutcome
from src.service.ticketing.domain.value_object.locality_order import LocalityOrder
from src.service.ticketing.domain.value_object.money import ZERO, to_money


NO_DISCOUNT = Decimal('1')


@attrs.define
class Cart:
    client_id: int
    orders: tuple[LocalityOrder, ...] = attrs.field(factory=tuple, converter=tuple)
    total_price: Decimal = attrs.field(default=ZERO, converter=to_money)
    coupon_claimed: bool = False
    applied_coupon_name: Optional[str] = None
    applied_discount_factor: Decimal = NO_DISCOUNT
    total_price_with_discount: Decimal = attrs.field(default=ZERO, converter=to_money)
    status: CartStatus = CartStatus.OPEN
    checkout_attempt_id: Optional[str] = None
    checkout_started_at: Optional[datetime] = None
    settled_outcome: Optional[PaymentOutcome] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def open_for(cls, *, client_id: int) -> 'Cart':
        return cls(client_id=client_id)

    @property
    def is_empty(self) -> bool:
        return not self.orders

    # ------------------------------------------------------------------ guards

    def validate_open(self) -> None:
        if self.status != CartStatus.OPEN:
            raise ConflictError(
                f'Cart {self.id} is {self.status.value}, only OPEN carts can be modified',
                ErrorKind.CART_NOT_OPEN,
            )

    def validate_not_empty(self) -> None:
        if self.is_empty:
            raise DomainError('Shopping cart is empty', ErrorKind.EMPTY_CART)

    def validate_can_claim_coupon(self) -> None:
        self.validate_open()
        self.validate_not_empty()
        if self.coupon_claimed:
            raise ConflictError(
                f'Coupon {self.applied_coupon_name} is already applied to this cart',
                ErrorKind.COUPON_ALREADY_APPLIED,
            )

    # ------------------------------------------------------------------ totals

    def _with_orders(self, orders: tuple[LocalityOrder, ...], **changes) -> 'Cart':
        cart = attrs.evolve(self, orders=orders, **changes)
        total = to_money(sum((order.subtotal for order in cart.orders), ZERO))
        discounted = (
            to_money(total * cart.applied_discount_factor) if cart.coupon_claimed else total
        )
        return attrs.evolve(cart, total_price=total, total_price_with_discount=discounted)

    def _without_coupon(self, **changes) -> 'Cart':
        return self._with_orders(
            self.orders,
            coupon_claimed=False,
            applied_coupon_name=None,
            applied_discount_factor=NO_DISCOUNT,
            **changes,
        )

    # ------------------------------------------------------------------ orders

    @Logger.io
    def add_tickets(
        self, *, event_id: int, locality_name: str, tickets: int, unit_price: Decimal
    ) -> 'Cart':
        self.validate_open()
        if tickets < 1:
            raise DomainError('At least one ticket must be selected')

        orders = list(self.orders)
        for index, order in enumerate(orders):
            if order.same_line(
                event_id=event_id, locality_name=locality_name, unit_price=unit_price
            ):
                orders[index] = order.with_tickets(order.tickets_selected + tickets)
                break
        else:
            orders.append(
                LocalityOrder(
                    event_id=event_id,
                    locality_name=locality_name,
                    tickets_selected=tickets,
                    unit_price=unit_price,
                )
            )
        return self._with_orders(tuple(orders))

    @Logger.io
    def remove_tickets(self, *, event_id: int, locality_name: str, tickets: int) -> 'Cart':
        self.validate_open()
        if tickets < 1:
            raise DomainError('At least one ticket must be selected')

        candidates = [
            index
            for index, order in enumerate(self.orders)
            if order.is_for(event_id=event_id, locality_name=locality_name)
        ]
        if not candidates:
            raise NotFoundError(
                f'No order for locality {locality_name} of event {event_id} in the cart',
                ErrorKind.LOCALITY_ORDER_NOT_FOUND,
            )
        target = next((i for i in candidates if self.orders[i].tickets_selected >= tickets), None)
        if target is None:
            raise DomainError(
                f'The cart holds fewer than {tickets} tickets for locality {locality_name}',
                ErrorKind.INSUFFICIENT_ORDER_QUANTITY,
            )

        orders = list(self.orders)
        remaining = orders[target].tickets_selected - tickets
        if remaining:
            orders[target] = orders[target].with_tickets(remaining)
        else:
            del orders[target]

        cart = self._with_orders(tuple(orders))
        # An empty cart cannot keep a coupon; it was never consumed so nothing else to undo
        return cart._without_coupon() if cart.is_empty else cart

    # ------------------------------------------------------------------ coupons

    @Logger.io
    def apply_coupon(self, *, coupon_name: str, discount_factor: Decimal) -> 'Cart':
        self.validate_can_claim_coupon()
        return self._with_orders(
            self.orders,
            coupon_claimed=True,
            applied_coupon_name=coupon_name,
            applied_discount_factor=discount_factor,
        )

    @Logger.io
    def remove_coupon(self) -> 'Cart':
        self.validate_open()
        return self._without_coupon()

    # ------------------------------------------------------------------ checkout / settlement

    @Logger.io
    def start_checkout(self, *, checkout_attempt_id: str, now: datetime) -> 'Cart':
        self.validate_open()
        self.validate_not_empty()
        return attrs.evolve(
            self,
            status=CartStatus.PENDING_PAYMENT,
            checkout_attempt_id=checkout_attempt_id,
            checkout_started_at=now,
            settled_outcome=None,
        )

    def validate_pending(self) -> None:
        if self.status != CartStatus.PENDING_PAYMENT:
            raise ConflictError(
                f'Cart {self.id} is {self.status.value}, expected PENDING_PAYMENT',
                ErrorKind.CART_NOT_PENDING_PAYMENT,
            )

    def attach_preference(self, *, preference_id: str) -> 'Cart':
        self.validate_pending()
        orders = tuple(attrs.evolve(order, paying_order_id=preference_id) for order in self.orders)
        return attrs.evolve(self, orders=orders)

    def _back_to_open(self, **changes) -> 'Cart':
        orders = tuple(attrs.evolve(order, paying_order_id=None) for order in self.orders)
        return attrs.evolve(self, orders=orders, status=CartStatus.OPEN, **changes)

    @Logger.io
    def revert_checkout(self) -> 'Cart':
        """Compensation when the payment preference could not be created."""
        self.validate_pending()
        return self._back_to_open(checkout_attempt_id=None, checkout_started_at=None)

    @Logger.io
    def mark_paid(self) -> 'Cart':
        self.validate_pending()
        return attrs.evolve(
            self, status=CartStatus.PAID, settled_outcome=PaymentOutcome.APPROVED
        )

    @Logger.io
    def reject_payment(self) -> 'Cart':
        """The client keeps the reserved tickets and may retry or cancel."""
        self.validate_pending()
        return self._back_to_open(settled_outcome=PaymentOutcome.REJECTED)

    @Logger.io
    def expire_payment(self) -> 'Cart':
        """Every order is released back to inventory by the caller; the cart empties."""
        self.validate_pending()
        return self._back_to_open(settled_outcome=PaymentOutcome.EXPIRED)._with_orders(
            (),
            coupon_claimed=False,
            applied_coupon_name=None,
            applied_discount_factor=NO_DISCOUNT,
        )

    @Logger.io
    def cancel_by_admin(self) -> 'Cart':
        if self.status not in CartStatus.active():
            raise ConflictError(
                f'Cart {self.id} is {self.status.value} and cannot be reset',
                ErrorKind.CART_NOT_OPEN,
            )
        return attrs.evolve(self, status=CartStatus.CANCELED)
