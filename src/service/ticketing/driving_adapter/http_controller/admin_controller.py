from typing import List

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import as_utc
from src.service.ticketing.app.command.create_coupon_use_case import CreateCouponUseCase
from src.service.ticketing.app.command.create_event_use_case import CreateEventUseCase
from src.service.ticketing.app.command.delete_admin_use_case import DeleteAdminUseCase
from src.service.ticketing.app.command.delete_coupon_use_case import DeleteCouponUseCase
from src.service.ticketing.app.command.delete_event_use_case import DeleteEventUseCase
from src.service.ticketing.app.command.reset_cart_use_case import ResetCartUseCase
from src.service.ticketing.app.command.update_admin_use_case import UpdateAdminUseCase
from src.service.ticketing.app.command.update_coupon_use_case import UpdateCouponUseCase
from src.service.ticketing.app.command.update_event_use_case import UpdateEventUseCase
from src.service.ticketing.app.query.list_coupons_use_case import ListCouponsUseCase
from src.service.ticketing.driving_adapter.http_controller.auth.role_auth import (
    Principal,
    require_admin,
)
from src.service.ticketing.driving_adapter.http_controller.result_response import success
from src.service.ticketing.driving_adapter.http_controller.schema.admin_schema import (
    AdminResponse,
    AdminUpdateRequest,
)
from src.service.ticketing.driving_adapter.http_controller.schema.cart_schema import (
    CartResponse,
)
from src.service.ticketing.driving_adapter.http_controller.schema.coupon_schema import (
    CouponCreateRequest,
    CouponResponse,
    CouponUpdateRequest,
)
from src.service.ticketing.driving_adapter.http_controller.schema.event_schema import (
    EventRequest,
    EventResponse,
)
from src.service.ticketing.driving_adapter.http_controller.schema.response_schema import (
    ApiResponse,
    DeletedCountResponse,
)


router = APIRouter()


# === Events ===


@router.post(
    '/events', response_model=ApiResponse[EventResponse], status_code=status.HTTP_201_CREATED
)
@Logger.io
async def create_event(
    request: EventRequest,
    admin: Principal = Depends(require_admin),
    use_case: CreateEventUseCase = Depends(CreateEventUseCase.depends),
) -> JSONResponse:
    event = await use_case.execute(
        name=request.name,
        city=request.city,
        address=request.address,
        event_date=as_utc(request.event_date),
        event_type=request.event_type,
        localities=[loc.to_input() for loc in request.localities],
        image_url=request.image_url,
        available_for_purchase=request.available_for_purchase,
    )
    return success(
        EventResponse.from_entity(event),
        message='Event created',
        status_code=status.HTTP_201_CREATED,
    )


@router.put('/events/{event_id}', response_model=ApiResponse[EventResponse])
@Logger.io
async def update_event(
    event_id: int,
    request: EventRequest,
    admin: Principal = Depends(require_admin),
    use_case: UpdateEventUseCase = Depends(UpdateEventUseCase.depends),
) -> JSONResponse:
    event = await use_case.execute(
        event_id=event_id,
        name=request.name,
        city=request.city,
        address=request.address,
        event_date=as_utc(request.event_date),
        event_type=request.event_type,
        localities=[loc.to_input() for loc in request.localities],
        image_url=request.image_url,
        available_for_purchase=request.available_for_purchase,
    )
    return success(EventResponse.from_entity(event), message='Event updated')


@router.delete('/events/{event_id}', response_model=ApiResponse[None])
@Logger.io
async def delete_event(
    event_id: int,
    admin: Principal = Depends(require_admin),
    use_case: DeleteEventUseCase = Depends(DeleteEventUseCase.depends),
) -> JSONResponse:
    await use_case.execute(event_id=event_id)
    return success(message='Event deleted')


@router.delete('/events', response_model=ApiResponse[DeletedCountResponse])
@Logger.io
async def delete_all_events(
    admin: Principal = Depends(require_admin),
    use_case: DeleteEventUseCase = Depends(DeleteEventUseCase.depends),
) -> JSONResponse:
    deleted = await use_case.execute_all()
    return success(
        DeletedCountResponse(deleted=deleted),
        message='Events without tickets taken deleted',
    )


# === Coupons ===


@router.post(
    '/coupons', response_model=ApiResponse[CouponResponse], status_code=status.HTTP_201_CREATED
)
@Logger.io
async def create_coupon(
    request: CouponCreateRequest,
    admin: Principal = Depends(require_admin),
    use_case: CreateCouponUseCase = Depends(CreateCouponUseCase.depends),
) -> JSONResponse:
    coupon = await use_case.execute(
        name=request.name,
        discount_percent=request.discount_percent,
        expiration_date=as_utc(request.expiration_date),
        min_purchase_amount=request.min_purchase_amount,
    )
    return success(
        CouponResponse.from_entity(coupon),
        message='Coupon created',
        status_code=status.HTTP_201_CREATED,
    )


@router.get('/coupons', response_model=ApiResponse[List[CouponResponse]])
@Logger.io
async def list_coupons(
    admin: Principal = Depends(require_admin),
    use_case: ListCouponsUseCase = Depends(ListCouponsUseCase.depends),
) -> JSONResponse:
    coupons = await use_case.list_all()
    return success([CouponResponse.from_entity(c) for c in coupons], message='Coupons found')


@router.put('/coupons/{coupon_id}', response_model=ApiResponse[CouponResponse])
@Logger.io
async def update_coupon(
    coupon_id: int,
    request: CouponUpdateRequest,
    admin: Principal = Depends(require_admin),
    use_case: UpdateCouponUseCase = Depends(UpdateCouponUseCase.depends),
) -> JSONResponse:
    coupon = await use_case.execute(
        coupon_id=coupon_id,
        discount_percent=request.discount_percent,
        expiration_date=as_utc(request.expiration_date),
        min_purchase_amount=request.min_purchase_amount,
    )
    return success(CouponResponse.from_entity(coupon), message='Coupon updated')


@router.delete('/coupons/{coupon_id}', response_model=ApiResponse[None])
@Logger.io
async def delete_coupon(
    coupon_id: int,
    admin: Principal = Depends(require_admin),
    use_case: DeleteCouponUseCase = Depends(DeleteCouponUseCase.depends),
) -> JSONResponse:
    await use_case.execute(coupon_id=coupon_id)
    return success(message='Coupon deleted')


@router.delete('/coupons', response_model=ApiResponse[DeletedCountResponse])
@Logger.io
async def delete_all_coupons(
    admin: Principal = Depends(require_admin),
    use_case: DeleteCouponUseCase = Depends(DeleteCouponUseCase.depends),
) -> JSONResponse:
    deleted = await use_case.execute_all()
    return success(DeletedCountResponse(deleted=deleted), message='Coupons deleted')


# === Carts ===


@router.post('/carts/{client_id}/reset', response_model=ApiResponse[CartResponse])
@Logger.io
async def reset_cart(
    client_id: int,
    admin: Principal = Depends(require_admin),
    use_case: ResetCartUseCase = Depends(ResetCartUseCase.depends),
) -> JSONResponse:
    cart = await use_case.execute(client_id=client_id)
    return success(CartResponse.from_entity(cart), message='Cart reset')


# === Admin accounts ===


@router.put('/admins/{admin_id}', response_model=ApiResponse[AdminResponse])
@Logger.io
async def update_admin(
    admin_id: int,
    request: AdminUpdateRequest,
    admin: Principal = Depends(require_admin),
    use_case: UpdateAdminUseCase = Depends(UpdateAdminUseCase.depends),
) -> JSONResponse:
    updated = await use_case.execute(admin_id=admin_id, email=request.email)
    return success(AdminResponse.from_entity(updated), message='Admin updated')


@router.delete('/admins/{admin_id}', response_model=ApiResponse[None])
@Logger.io
async def delete_admin(
    admin_id: int,
    admin: Principal = Depends(require_admin),
    use_case: DeleteAdminUseCase = Depends(DeleteAdminUseCase.depends),
) -> JSONResponse:
    await use_case.execute(admin_id=admin_id)
    return success(message='Admin deleted')
