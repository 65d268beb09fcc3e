from decimal import Decimal
from typing import List, Optional

import attrs

from src.service.ticketing.domain.enum.payment_outcome import PaymentOutcome


@attrs.frozen
class CheckoutItem:
    title: str
    event_id: int
    locality_name: str
    quantity: int
    unit_price: Decimal  # discount already applied


@attrs.frozen
class CheckoutSnapshot:
    """Frozen view of a cart handed to the payment gateway."""

    checkout_attempt_id: str
    client_id: int
    client_email: str
    items: List[CheckoutItem]
    total_price: Decimal
    total_price_with_discount: Decimal
    coupon_name: Optional[str] = None


@attrs.frozen
class PaymentPreference:
    preference_id: str
    init_point: Optional[str] = None


@attrs.frozen
class PaymentNotification:
    checkout_attempt_id: str
    outcome: PaymentOutcome
    payment_id: Optional[str] = None


@attrs.frozen
class CheckoutResult:
    preference_id: str
    checkout_attempt_id: str
    init_point: Optional[str] = None
