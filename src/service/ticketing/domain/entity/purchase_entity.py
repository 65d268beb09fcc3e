from datetime import datetime
from decimal import Decimal
from typing import Optional

import attrs

from src.service.ticketing.domain.entity.cart_entity import Cart
from src.service.ticketing.domain.value_object.locality_order import LocalityOrder


@attrs.frozen
class Purchase:
    """Immutable record of a paid cart."""

    client_id: int
    cart_id: int
    checkout_attempt_id: str
    orders: tuple[LocalityOrder, ...]
    total_price: Decimal
    total_price_with_discount: Decimal
    coupon_name: Optional[str]
    purchased_at: datetime
    id: Optional[int] = None

    @classmethod
    def from_cart(cls, *, cart: Cart, now: datetime) -> 'Purchase':
        assert cart.id is not None and cart.checkout_attempt_id is not None
        return cls(
            client_id=cart.client_id,
            cart_id=cart.id,
            checkout_attempt_id=cart.checkout_attempt_id,
            orders=cart.orders,
            total_price=cart.total_price,
            total_price_with_discount=cart.total_price_with_discount,
            coupon_name=cart.applied_coupon_name if cart.coupon_claimed else None,
            purchased_at=now,
        )
