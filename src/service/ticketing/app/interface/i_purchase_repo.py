from abc import ABC, abstractmethod
from typing import Optional

from src.service.ticketing.app.dto.page import Page
from src.service.ticketing.domain.entity.purchase_entity import Purchase


class IPurchaseRepo(ABC):
    @abstractmethod
    async def create(self, *, purchase: Purchase) -> Purchase:
        pass

    @abstractmethod
    async def get_by_checkout_attempt_id(self, *, checkout_attempt_id: str) -> Optional[Purchase]:
        pass

    @abstractmethod
    async def list_by_client(self, *, client_id: int, page: int, size: int) -> Page[Purchase]:
        """Newest first"""
        pass
