from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.command.delete_client_use_case import DeleteClientUseCase
from src.service.ticketing.app.command.update_client_use_case import UpdateClientUseCase
from src.service.ticketing.app.query.get_cart_use_case import GetCartUseCase
from src.service.ticketing.app.query.get_client_use_case import GetClientUseCase
from src.service.ticketing.app.query.list_purchases_use_case import ListPurchasesUseCase
from src.service.ticketing.driving_adapter.http_controller.auth.role_auth import (
    Principal,
    require_self,
)
from src.service.ticketing.driving_adapter.http_controller.result_response import success
from src.service.ticketing.driving_adapter.http_controller.schema.cart_schema import (
    CartResponse,
)
from src.service.ticketing.driving_adapter.http_controller.schema.client_schema import (
    ClientResponse,
    ClientUpdateRequest,
    PurchasePageResponse,
)
from src.service.ticketing.driving_adapter.http_controller.schema.response_schema import (
    ApiResponse,
)


router = APIRouter()


@router.get('/{client_id}', response_model=ApiResponse[ClientResponse])
@Logger.io
async def get_client(
    client_id: int,
    principal: Principal = Depends(require_self),
    use_case: GetClientUseCase = Depends(GetClientUseCase.depends),
) -> JSONResponse:
    client = await use_case.get_by_id(client_id=client_id)
    return success(ClientResponse.from_entity(client), message='Client found')


@router.put('/{client_id}', response_model=ApiResponse[ClientResponse])
@Logger.io
async def update_client(
    client_id: int,
    request: ClientUpdateRequest,
    principal: Principal = Depends(require_self),
    use_case: UpdateClientUseCase = Depends(UpdateClientUseCase.depends),
) -> JSONResponse:
    client = await use_case.execute(
        client_id=client_id,
        name=request.name,
        phone=request.phone,
        address=request.address,
        email=request.email,
    )
    message = (
        'Client updated' if client.is_active else 'Client updated, verify the new email'
    )
    return success(ClientResponse.from_entity(client), message=message)


@router.delete('/{client_id}', response_model=ApiResponse[None])
@Logger.io
async def delete_client(
    client_id: int,
    principal: Principal = Depends(require_self),
    use_case: DeleteClientUseCase = Depends(DeleteClientUseCase.depends),
) -> JSONResponse:
    await use_case.execute(client_id=client_id)
    return success(message='Account deactivated')


@router.get('/{client_id}/cart', response_model=ApiResponse[CartResponse])
@Logger.io
async def get_cart(
    client_id: int,
    principal: Principal = Depends(require_self),
    use_case: GetCartUseCase = Depends(GetCartUseCase.depends),
) -> JSONResponse:
    view = await use_case.get_for_client(client_id=client_id)
    return success(
        CartResponse.from_entity(view.cart, orders=view.visible_orders), message='Cart found'
    )


@router.get('/{client_id}/purchases', response_model=ApiResponse[PurchasePageResponse])
@Logger.io
async def list_purchases(
    client_id: int,
    page: int = 0,
    size: int = 20,
    principal: Principal = Depends(require_self),
    use_case: ListPurchasesUseCase = Depends(ListPurchasesUseCase.depends),
) -> JSONResponse:
    purchases = await use_case.list_for_client(client_id=client_id, page=page, size=size)
    return success(PurchasePageResponse.from_page(purchases), message='Purchases found')
