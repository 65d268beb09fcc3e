from abc import ABC, abstractmethod
from typing import Optional

from pydantic import SecretStr


class IPasswordHasher(ABC):
    @abstractmethod
    def hash_password(self, *, plain_password: SecretStr) -> str: ...

    @abstractmethod
    def verify_password(
        self, *, plain_password: SecretStr, hashed_password: Optional[str]
    ) -> bool:
        """
        False on mismatch or when there is no stored hash, never raises for a bad password.
        A missing hash still costs one full hash check so unknown emails answer as slowly
        as wrong passwords.
        """
