"""
Mock payment gateway

Preferences are made up locally and the webhook carries the outcome directly:

    POST /payments/webhook
    {"checkoutAttemptId": "...", "status": "APPROVED" | "REJECTED" | "EXPIRED"}
"""

from typing import Any, List, Mapping, Optional

from uuid_utils import uuid7

from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import DomainError, PaymentGatewayError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.dto.payment_dto import (
    CheckoutSnapshot,
    PaymentNotification,
    PaymentPreference,
)
from src.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ticketing.domain.enum.payment_outcome import PaymentOutcome


class MockPaymentGateway(IPaymentGateway):
    def __init__(self, *, fail_with: Optional[str] = None):
        self.fail_with = fail_with
        self.created: List[CheckoutSnapshot] = []  # Store snapshots for testing

    @Logger.io
    async def create_preference(self, *, snapshot: CheckoutSnapshot) -> PaymentPreference:
        if self.fail_with:
            raise PaymentGatewayError(self.fail_with)
        self.created.append(snapshot)
        preference_id = f'PREF_MOCK_{uuid7().hex[:16].upper()}'
        Logger.base.info(
            f'💳 [MOCK_PAY] preference={preference_id} attempt={snapshot.checkout_attempt_id} '
            f'amount={snapshot.total_price_with_discount}'
        )
        return PaymentPreference(
            preference_id=preference_id,
            init_point=f'https://mockpay.local/checkout/{preference_id}',
        )

    @Logger.io
    async def resolve_notification(
        self, *, payload: Mapping[str, Any], headers: Mapping[str, str]
    ) -> Optional[PaymentNotification]:
        attempt_id = payload.get('checkoutAttemptId')
        status = str(payload.get('status', '')).upper()
        if not attempt_id:
            raise DomainError('checkoutAttemptId is required', ErrorKind.VALIDATION_ERROR)
        try:
            outcome = PaymentOutcome(status)
        except ValueError:
            Logger.base.info(f'💳 [MOCK_PAY] ignoring non terminal status {status!r}')
            return None
        return PaymentNotification(
            checkout_attempt_id=str(attempt_id),
            outcome=outcome,
            payment_id=payload.get('paymentId'),
        )
