from abc import ABC, abstractmethod
from typing import Optional

from src.service.ticketing.domain.entity.admin_entity import AdminEntity


class IAdminRepo(ABC):
    @abstractmethod
    async def get_by_username(self, *, username: str) -> Optional[AdminEntity]:
        pass

    @abstractmethod
    async def get_by_email(self, *, email: str) -> Optional[AdminEntity]:
        pass

    @abstractmethod
    async def create(self, *, admin: AdminEntity) -> AdminEntity:
        pass

    @abstractmethod
    async def update(self, *, admin: AdminEntity) -> AdminEntity:
        pass

    @abstractmethod
    async def get_by_id(self, *, admin_id: int) -> Optional[AdminEntity]:
        pass

    @abstractmethod
    async def delete(self, *, admin_id: int) -> bool:
        pass
