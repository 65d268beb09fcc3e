from abc import ABC, abstractmethod
from typing import Optional

from src.service.ticketing.domain.entity.client_entity import ClientEntity


class IClientRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, client_id: int) -> Optional[ClientEntity]:
        pass

    @abstractmethod
    async def get_by_email(self, *, email: str) -> Optional[ClientEntity]:
        pass

    @abstractmethod
    async def create(self, *, client: ClientEntity) -> ClientEntity:
        """
        Raises:
            ConflictError: ACCOUNT_ALREADY_EXISTS when the email is taken
        """
        pass

    @abstractmethod
    async def update(self, *, client: ClientEntity) -> ClientEntity:
        pass
