"""
Coupon Registry Interface
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from src.service.ticketing.domain.entity.coupon_entity import Coupon


class ICouponRepo(ABC):
    @abstractmethod
    async def get_by_name(self, *, name: str) -> Optional[Coupon]:
        pass

    @abstractmethod
    async def get_by_id(self, *, coupon_id: int) -> Optional[Coupon]:
        pass

    @abstractmethod
    async def list_all(self) -> List[Coupon]:
        pass

    @abstractmethod
    async def create(self, *, coupon: Coupon) -> Coupon:
        """
        Raises:
            ConflictError: COUPON_ALREADY_EXISTS when the name is taken
        """
        pass

    @abstractmethod
    async def update(self, *, coupon: Coupon) -> Coupon:
        pass

    @abstractmethod
    async def delete(self, *, coupon_id: int) -> bool:
        pass

    @abstractmethod
    async def delete_all(self) -> int:
        """Returns the number of deleted coupons"""
        pass

    @abstractmethod
    async def mark_consumed(self, *, name: str) -> None:
        """Flip the one-shot ``used`` flag; calling it again is a no-op"""
        pass
