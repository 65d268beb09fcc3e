import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from opentelemetry import trace

from src.platform.exception.result import Err, Ok
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ordering_metrics import metrics
from src.service.ticketing.app.command.apply_coupon_use_case import ApplyCouponUseCase
from src.service.ticketing.app.command.cancel_tickets_use_case import CancelTicketsUseCase
from src.service.ticketing.app.command.checkout_cart_use_case import CheckoutCartUseCase
from src.service.ticketing.app.command.remove_coupon_use_case import RemoveCouponUseCase
from src.service.ticketing.app.command.reserve_tickets_use_case import ReserveTicketsUseCase
from src.service.ticketing.driving_adapter.http_controller.auth.role_auth import (
    Principal,
    require_self,
)
from src.service.ticketing.driving_adapter.http_controller.result_response import respond
from src.service.ticketing.driving_adapter.http_controller.schema.cart_schema import (
    ApplyCouponRequest,
    CancelTicketsRequest,
    CartResponse,
    CheckoutResponse,
    ReserveTicketsRequest,
)
from src.service.ticketing.driving_adapter.http_controller.schema.response_schema import (
    ApiResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


def _record(operation: str, result: Ok | Err, started: float) -> None:
    metrics.record_operation(
        operation=operation,
        result='ok' if isinstance(result, Ok) else result.kind.value,
        duration=time.perf_counter() - started,
    )


@router.post('/{client_id}/reserve', response_model=ApiResponse[CartResponse])
@Logger.io
async def reserve_tickets(
    client_id: int,
    request: ReserveTicketsRequest,
    principal: Principal = Depends(require_self),
    use_case: ReserveTicketsUseCase = Depends(ReserveTicketsUseCase.depends),
) -> JSONResponse:
    started = time.perf_counter()
    with tracer.start_as_current_span('controller.reserve_tickets') as span:
        span.set_attribute('client.id', client_id)
        span.set_attribute('event.id', request.event_id)
        result = await use_case.execute(
            client_id=client_id,
            event_id=request.event_id,
            locality_name=request.locality_name,
            tickets_selected=request.tickets_selected,
            expected_unit_price=request.expected_unit_price,
        )
    _record('reserve', result, started)
    return respond(result, message='Tickets reserved', to_schema=CartResponse.from_entity)


@router.post('/{client_id}/cancel', response_model=ApiResponse[CartResponse])
@Logger.io
async def cancel_tickets(
    client_id: int,
    request: CancelTicketsRequest,
    principal: Principal = Depends(require_self),
    use_case: CancelTicketsUseCase = Depends(CancelTicketsUseCase.depends),
) -> JSONResponse:
    started = time.perf_counter()
    result = await use_case.execute(
        client_id=client_id,
        event_id=request.event_id,
        locality_name=request.locality_name,
        tickets_selected=request.tickets_selected,
    )
    _record('cancel', result, started)
    return respond(result, message='Tickets cancelled', to_schema=CartResponse.from_entity)


@router.post('/{client_id}/coupon', response_model=ApiResponse[CartResponse])
@Logger.io
async def apply_coupon(
    client_id: int,
    request: ApplyCouponRequest,
    principal: Principal = Depends(require_self),
    use_case: ApplyCouponUseCase = Depends(ApplyCouponUseCase.depends),
) -> JSONResponse:
    started = time.perf_counter()
    result = await use_case.execute(client_id=client_id, coupon_name=request.coupon_name)
    _record('apply_coupon', result, started)
    return respond(result, message='Coupon applied', to_schema=CartResponse.from_entity)


@router.delete('/{client_id}/coupon', response_model=ApiResponse[CartResponse])
@Logger.io
async def remove_coupon(
    client_id: int,
    principal: Principal = Depends(require_self),
    use_case: RemoveCouponUseCase = Depends(RemoveCouponUseCase.depends),
) -> JSONResponse:
    started = time.perf_counter()
    result = await use_case.execute(client_id=client_id)
    _record('remove_coupon', result, started)
    return respond(result, message='Coupon removed', to_schema=CartResponse.from_entity)


@router.post('/{client_id}/checkout', response_model=ApiResponse[CheckoutResponse])
@Logger.io
async def checkout(
    client_id: int,
    principal: Principal = Depends(require_self),
    use_case: CheckoutCartUseCase = Depends(CheckoutCartUseCase.depends),
) -> JSONResponse:
    started = time.perf_counter()
    with tracer.start_as_current_span('controller.checkout') as span:
        span.set_attribute('client.id', client_id)
        result = await use_case.execute(client_id=client_id)
    _record('checkout', result, started)
    return respond(
        result, message='Checkout started', to_schema=CheckoutResponse.from_result
    )
