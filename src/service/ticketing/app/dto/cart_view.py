from typing import Tuple

import attrs

from src.service.ticketing.domain.entity.cart_entity import Cart
from src.service.ticketing.domain.value_object.locality_order import LocalityOrder


@attrs.frozen
class CartView:
    """The client's cart with the orders for imminent events left out of the listing."""

    cart: Cart
    visible_orders: Tuple[LocalityOrder, ...]
