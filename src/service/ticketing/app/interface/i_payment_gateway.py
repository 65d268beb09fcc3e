"""
Payment Adapter Interface

The ordering engine only ever sees these two operations; gateway specific statuses are
translated into PaymentOutcome values inside the adapter.
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

from src.service.ticketing.app.dto.payment_dto import (
    CheckoutSnapshot,
    PaymentNotification,
    PaymentPreference,
)


class IPaymentGateway(ABC):
    @abstractmethod
    async def create_preference(self, *, snapshot: CheckoutSnapshot) -> PaymentPreference:
        """
        Register a pending charge for the snapshot

        Raises:
            PaymentGatewayError: PAYMENT_GATEWAY_UNREACHABLE on transport failure or timeout
        """
        pass

    @abstractmethod
    async def resolve_notification(
        self, *, payload: Mapping[str, Any], headers: Mapping[str, str]
    ) -> Optional[PaymentNotification]:
        """
        Translate an inbound webhook into a settlement request

        Returns:
            None when the notification does not settle anything (non-terminal status,
            unrelated topic)

        Raises:
            AuthenticationError: AUTH_UNAUTHORIZED when the signature does not verify
        """
        pass
