from abc import ABC, abstractmethod
from typing import Optional

from src.service.ticketing.domain.entity.payment_attempt_entity import PaymentAttempt


class IPaymentAttemptRepo(ABC):
    @abstractmethod
    async def create(self, *, attempt: PaymentAttempt) -> PaymentAttempt:
        pass

    @abstractmethod
    async def get_by_checkout_attempt_id(
        self, *, checkout_attempt_id: str
    ) -> Optional[PaymentAttempt]:
        """The settlement recorded for this checkout attempt, if any"""
        pass
