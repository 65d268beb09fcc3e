from typing import Any, Dict

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
import orjson

from src.platform.config.di import Container
from src.platform.exception.exceptions import DomainError
from src.platform.exception.result import Err
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.command.settle_payment_use_case import SettlePaymentUseCase
from src.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ticketing.driving_adapter.http_controller.result_response import (
    failure,
    success,
)


router = APIRouter()


async def _read_payload(request: Request) -> Dict[str, Any]:
    body = await request.body()
    try:
        payload = orjson.loads(body) if body else {}
    except orjson.JSONDecodeError as e:
        raise DomainError('Webhook body is not valid JSON') from e
    if not isinstance(payload, dict):
        raise DomainError('Webhook body must be a JSON object')
    # MercadoPago repeats type and data.id in the query string
    for key, value in request.query_params.items():
        if key == 'data.id':
            payload.setdefault('data', {}).setdefault('id', value)
        else:
            payload.setdefault(key, value)
    return payload


@router.post('/webhook')
@Logger.io
@inject
async def payment_webhook(
    request: Request,
    payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
    use_case: SettlePaymentUseCase = Depends(SettlePaymentUseCase.depends),
) -> JSONResponse:
    """
    Gateway callback. Notifications that do not settle anything are acknowledged with 200
    so the gateway stops retrying them.
    """
    payload = await _read_payload(request)
    notification = await payment_gateway.resolve_notification(
        payload=payload, headers=request.headers
    )
    if notification is None:
        return success(message='Notification ignored')

    result = await use_case.execute(
        checkout_attempt_id=notification.checkout_attempt_id, outcome=notification.outcome
    )
    if isinstance(result, Err):
        return failure(result)

    settlement = result.value
    return success(
        {
            'checkoutAttemptId': settlement.checkout_attempt_id,
            'outcome': settlement.outcome.value,
            'duplicate': settlement.duplicate,
        },
        message='Duplicate notification' if settlement.duplicate else 'Payment settled',
    )
