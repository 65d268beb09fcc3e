from decimal import Decimal
from typing import Any, Optional

import attrs

from src.service.ticketing.domain.value_object.money import to_money


@attrs.frozen
class LocalityOrder:
    """
    One line of a cart: a count of tickets in one locality at the price frozen when
    the tickets were reserved.
    """

    event_id: int
    locality_name: str
    tickets_selected: int
    unit_price: Decimal = attrs.field(converter=to_money)
    paying_order_id: Optional[str] = None

    @property
    def subtotal(self) -> Decimal:
        return to_money(self.unit_price * self.tickets_selected)

    def is_for(self, *, event_id: int, locality_name: str) -> bool:
        return self.event_id == event_id and self.locality_name == locality_name

    def same_line(self, *, event_id: int, locality_name: str, unit_price: Decimal) -> bool:
        return self.is_for(event_id=event_id, locality_name=locality_name) and (
            self.unit_price == to_money(unit_price)
        )

    def with_tickets(self, tickets_selected: int) -> 'LocalityOrder':
        return attrs.evolve(self, tickets_selected=tickets_selected)

    def to_dict(self) -> dict[str, Any]:
        return {
            'event_id': self.event_id,
            'locality_name': self.locality_name,
            'tickets_selected': self.tickets_selected,
            'unit_price': str(self.unit_price),
            'paying_order_id': self.paying_order_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'LocalityOrder':
        return cls(
            event_id=int(data['event_id']),
            locality_name=data['locality_name'],
            tickets_selected=int(data['tickets_selected']),
            unit_price=Decimal(str(data['unit_price'])),
            paying_order_id=data.get('paying_order_id'),
        )
