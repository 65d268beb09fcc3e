from enum import StrEnum


class CartStatus(StrEnum):
    OPEN = 'OPEN'
    PENDING_PAYMENT = 'PENDING_PAYMENT'
    PAID = 'PAID'
    CANCELED = 'CANCELED'

    @classmethod
    def active(cls) -> tuple['CartStatus', ...]:
        """States in which the cart is the client's current cart."""
        return (cls.OPEN, cls.PENDING_PAYMENT)
