"""
MercadoPago Checkout Pro adapter

create_preference:
    POST {base}/checkout/preferences, ``external_reference`` carries the checkout attempt id
    so the payment can be matched back to the cart when the notification arrives.

resolve_notification:
    MercadoPago posts ``{"type": "payment", "data": {"id": "..."}}``. The status is never
    trusted from the webhook body; the payment is fetched from GET {base}/v1/payments/{id}.
    When a webhook secret is configured the ``x-signature`` header is checked:

        x-signature: ts=1704908010,v1=<hex hmac-sha256>
        manifest:    id:{data.id};request-id:{x-request-id};ts:{ts};
"""

import hashlib
import hmac
from typing import Any, Mapping, Optional

import httpx
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import AuthenticationError, PaymentGatewayError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.dto.payment_dto import (
    CheckoutSnapshot,
    PaymentNotification,
    PaymentPreference,
)
from src.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ticketing.domain.enum.payment_outcome import PaymentOutcome


tracer = trace.get_tracer(__name__)

_STATUS_TO_OUTCOME: dict[str, PaymentOutcome] = {
    'approved': PaymentOutcome.APPROVED,
    'rejected': PaymentOutcome.REJECTED,
    'cancelled': PaymentOutcome.REJECTED,
}


class MercadoPagoPaymentGateway(IPaymentGateway):
    def __init__(
        self,
        *,
        base_url: str = settings.MERCADOPAGO_BASE_URL,
        access_token: str = settings.MERCADOPAGO_ACCESS_TOKEN.get_secret_value(),
        webhook_secret: str = settings.MERCADOPAGO_WEBHOOK_SECRET.get_secret_value(),
        notification_url: str = settings.PAYMENT_NOTIFICATION_URL,
        timeout: float = settings.PAYMENT_GATEWAY_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.access_token = access_token
        self.webhook_secret = webhook_secret
        self.notification_url = notification_url
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport,
            headers={'Authorization': f'Bearer {self.access_token}'},
        )

    @Logger.io
    async def create_preference(self, *, snapshot: CheckoutSnapshot) -> PaymentPreference:
        body = {
            'items': [
                {
                    'id': f'{item.event_id}:{item.locality_name}',
                    'title': item.title,
                    'quantity': item.quantity,
                    'unit_price': float(item.unit_price),
                    'currency_id': 'COP',
                }
                for item in snapshot.items
            ],
            'payer': {'email': snapshot.client_email},
            'external_reference': snapshot.checkout_attempt_id,
            'notification_url': self.notification_url,
            'metadata': {
                'client_id': snapshot.client_id,
                'coupon_name': snapshot.coupon_name,
            },
        }
        with tracer.start_as_current_span(
            'payment.create_preference',
            attributes={
                'payment.provider': 'mercadopago',
                'checkout.attempt_id': snapshot.checkout_attempt_id,
                'checkout.items': len(snapshot.items),
            },
        ):
            try:
                async with self._client() as client:
                    response = await client.post(
                        '/checkout/preferences',
                        json=body,
                        headers={'X-Idempotency-Key': snapshot.checkout_attempt_id},
                    )
                    response.raise_for_status()
            except httpx.HTTPError as e:
                raise PaymentGatewayError(f'MercadoPago preference creation failed: {e}') from e

        data = response.json()
        Logger.base.info(
            f'💳 [MERCADOPAGO] preference={data.get("id")} attempt={snapshot.checkout_attempt_id}'
        )
        return PaymentPreference(preference_id=str(data['id']), init_point=data.get('init_point'))

    def _verify_signature(self, *, data_id: str, headers: Mapping[str, str]) -> None:
        if not self.webhook_secret:
            return
        parts = dict(
            part.strip().split('=', 1)
            for part in headers.get('x-signature', '').split(',')
            if '=' in part
        )
        ts, v1 = parts.get('ts'), parts.get('v1')
        if not ts or not v1:
            raise AuthenticationError('Missing webhook signature')
        manifest = f'id:{data_id};request-id:{headers.get("x-request-id", "")};ts:{ts};'
        expected = hmac.new(
            self.webhook_secret.encode('utf-8'), manifest.encode('utf-8'), hashlib.sha256
        ).hexdigest()
        if not hmac.compare_digest(expected, v1):
            raise AuthenticationError('Invalid webhook signature')

    @Logger.io
    async def resolve_notification(
        self, *, payload: Mapping[str, Any], headers: Mapping[str, str]
    ) -> Optional[PaymentNotification]:
        if payload.get('type') != 'payment':
            return None
        data_id = str((payload.get('data') or {}).get('id', ''))
        if not data_id:
            return None
        self._verify_signature(data_id=data_id, headers=headers)

        with tracer.start_as_current_span(
            'payment.lookup',
            attributes={'payment.provider': 'mercadopago', 'payment.id': data_id},
        ):
            try:
                async with self._client() as client:
                    response = await client.get(f'/v1/payments/{data_id}')
                    response.raise_for_status()
            except httpx.HTTPError as e:
                raise PaymentGatewayError(
                    f'MercadoPago payment {data_id} lookup failed: {e}',
                    ErrorKind.PAYMENT_GATEWAY_UNREACHABLE,
                ) from e

        payment = response.json()
        outcome = _STATUS_TO_OUTCOME.get(str(payment.get('status', '')).lower())
        attempt_id = payment.get('external_reference')
        if outcome is None or not attempt_id:
            Logger.base.info(
                f'💳 [MERCADOPAGO] payment={data_id} status={payment.get("status")} not settled'
            )
            return None
        return PaymentNotification(
            checkout_attempt_id=str(attempt_id), outcome=outcome, payment_id=data_id
        )
