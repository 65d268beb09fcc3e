from abc import ABC, abstractmethod


class INotifier(ABC):
    """Outbound account emails"""

    @abstractmethod
    async def send_verification_code(self, *, email: str, name: str, code: str) -> None:
        pass

    @abstractmethod
    async def send_recovery_code(self, *, email: str, username: str, code: str) -> None:
        pass
