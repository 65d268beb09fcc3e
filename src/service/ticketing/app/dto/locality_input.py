from decimal import Decimal

import attrs


@attrs.frozen
class LocalityInput:
    """Locality as an admin describes it; remaining capacity is derived, never supplied."""

    name: str
    price: Decimal
    total_capacity: int
