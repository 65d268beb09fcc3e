from datetime import datetime
from typing import Optional

import attrs

from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import ConflictError
from src.service.ticketing.domain.entity.cart_entity import Cart
from src.service.ticketing.domain.enum.payment_outcome import PaymentOutcome


@attrs.frozen
class PaymentAttempt:
    """
    Settlement ledger entry, one per checkout attempt.

    Written in the settling transaction and never changed afterwards, so a late or
    repeated gateway callback is recognised even after the cart moved on to a newer
    checkout attempt.
    """

    checkout_attempt_id: str
    cart_id: int
    client_id: int
    outcome: PaymentOutcome
    settled_at: datetime
    id: Optional[int] = None

    @classmethod
    def settle(cls, *, cart: Cart, outcome: PaymentOutcome, now: datetime) -> 'PaymentAttempt':
        assert cart.id is not None and cart.checkout_attempt_id is not None
        return cls(
            checkout_attempt_id=cart.checkout_attempt_id,
            cart_id=cart.id,
            client_id=cart.client_id,
            outcome=outcome,
            settled_at=now,
        )

    def validate_replay(self, *, outcome: PaymentOutcome) -> None:
        """A repeated callback must report the outcome that was already applied."""
        if self.outcome != outcome:
            raise ConflictError(
                f'Checkout attempt {self.checkout_attempt_id} was already settled '
                f'{self.outcome.value}, cannot settle it {outcome.value}',
                ErrorKind.CART_NOT_PENDING_PAYMENT,
            )
