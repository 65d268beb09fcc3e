from typing import Optional

import attrs

from src.service.ticketing.domain.entity.cart_entity import Cart
from src.service.ticketing.domain.entity.purchase_entity import Purchase
from src.service.ticketing.domain.enum.payment_outcome import PaymentOutcome


@attrs.frozen
class SettlementResult:
    checkout_attempt_id: str
    outcome: PaymentOutcome
    cart: Cart
    purchase: Optional[Purchase] = None
    new_cart: Optional[Cart] = None
    duplicate: bool = False
