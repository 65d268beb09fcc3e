from decimal import ROUND_HALF_UP, Decimal
from typing import List, Sequence, Tuple, Union


MONEY_QUANTUM = Decimal('0.01')
ZERO = Decimal('0.00')


def to_money(value: Union[Decimal, int, float, str]) -> Decimal:
    """Normalize an amount to two decimal places (half-up)."""
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def _to_cents(amount: Decimal) -> int:
    return int(to_money(amount) / MONEY_QUANTUM)


def _from_cents(cents: int) -> Decimal:
    return to_money(Decimal(cents) * MONEY_QUANTUM)


def allocate(total: Decimal, weights: Sequence[Decimal]) -> List[Decimal]:
    """
    Split ``total`` across ``weights`` proportionally, to the cent.

    The parts always add up to ``total``; leftover cents go to the parts with the largest
    fractional remainder (first one wins a tie).
    """
    cents = _to_cents(total)
    weight_sum = sum(weights, ZERO)
    if weight_sum == 0:
        return [ZERO for _ in weights]
    exact = [Decimal(cents) * weight / weight_sum for weight in weights]
    parts = [int(share) for share in exact]
    leftover = cents - sum(parts)
    by_remainder = sorted(range(len(parts)), key=lambda i: exact[i] - parts[i], reverse=True)
    for i in by_remainder[:leftover]:
        parts[i] += 1
    return [_from_cents(part) for part in parts]


def split_unit_prices(line_total: Decimal, quantity: int) -> List[Tuple[int, Decimal]]:
    """
    Express ``line_total`` as (quantity, unit price) pairs with whole-cent unit prices.

    One pair when the total divides evenly, otherwise two: 0.08 over 3 units is
    ``[(1, 0.02), (2, 0.03)]``.
    """
    base, extra = divmod(_to_cents(line_total), quantity)
    pairs = [(quantity - extra, _from_cents(base))]
    if extra:
        pairs.append((extra, _from_cents(base + 1)))
    return pairs
