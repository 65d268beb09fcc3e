"""
Cart Store Interface
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from src.service.ticketing.domain.entity.cart_entity import Cart


class ICartRepo(ABC):
    @abstractmethod
    async def get_by_client_id(self, *, client_id: int, for_update: bool = False) -> Optional[Cart]:
        """
        Get the client's current cart (OPEN or PENDING_PAYMENT)

        Args:
            client_id: owning client
            for_update: lock the row until the transaction ends
        """
        pass

    @abstractmethod
    async def get_by_id(self, *, cart_id: int, for_update: bool = False) -> Optional[Cart]:
        """Get a cart in any state"""
        pass

    @abstractmethod
    async def get_by_checkout_attempt_id(
        self, *, checkout_attempt_id: str, for_update: bool = False
    ) -> Optional[Cart]:
        """Get the cart (in any state) that carries this checkout attempt"""
        pass

    @abstractmethod
    async def create(self, *, cart: Cart) -> Cart:
        pass

    @abstractmethod
    async def save(self, *, cart: Cart) -> Cart:
        pass

    @abstractmethod
    async def list_pending_started_before(
        self, *, started_before: datetime, limit: int
    ) -> List[Cart]:
        """PENDING_PAYMENT carts whose checkout started before the given instant"""
        pass
