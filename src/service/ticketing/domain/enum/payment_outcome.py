from enum import StrEnum


class PaymentOutcome(StrEnum):
    """Terminal resolution of a pending checkout as reported by the payment gateway."""

    APPROVED = 'APPROVED'
    REJECTED = 'REJECTED'  # also covers gateway-side cancellations
    EXPIRED = 'EXPIRED'  # no callback within the payment window
