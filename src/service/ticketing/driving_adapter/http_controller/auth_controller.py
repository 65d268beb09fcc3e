from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials

from src.platform.config.di import Container
from src.platform.exception.exceptions import AuthenticationError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.command.login_admin_use_case import LoginAdminUseCase
from src.service.ticketing.app.command.login_client_use_case import LoginClientUseCase
from src.service.ticketing.app.command.register_client_use_case import RegisterClientUseCase
from src.service.ticketing.app.command.request_admin_recovery_use_case import (
    RequestAdminRecoveryUseCase,
)
from src.service.ticketing.app.command.reset_admin_password_use_case import (
    ResetAdminPasswordUseCase,
)
from src.service.ticketing.app.command.verify_client_use_case import VerifyClientUseCase
from src.service.ticketing.domain.enum.user_role import UserRole
from src.service.ticketing.driving_adapter.http_controller.auth.jwt_auth import JwtAuth
from src.service.ticketing.driving_adapter.http_controller.auth.role_auth import bearer_scheme
from src.service.ticketing.driving_adapter.http_controller.result_response import success
from src.service.ticketing.driving_adapter.http_controller.schema.auth_schema import (
    AdminRecoveryRequest,
    AdminResetPasswordRequest,
    LoginAdminRequest,
    LoginClientRequest,
    RegisterClientRequest,
    TokenResponse,
    VerifyClientRequest,
)
from src.service.ticketing.driving_adapter.http_controller.schema.client_schema import (
    ClientResponse,
)
from src.service.ticketing.driving_adapter.http_controller.schema.response_schema import (
    ApiResponse,
)


router = APIRouter()


@router.post(
    '/client/register',
    response_model=ApiResponse[ClientResponse],
    status_code=status.HTTP_201_CREATED,
)
@Logger.io
async def register_client(
    request: RegisterClientRequest,
    use_case: RegisterClientUseCase = Depends(RegisterClientUseCase.depends),
) -> JSONResponse:
    client = await use_case.execute(
        email=request.email,
        password=request.password,
        name=request.name,
        phone=request.phone,
        address=request.address,
    )
    return success(
        ClientResponse.from_entity(client),
        message='Account created, check your email for the verification code',
        status_code=status.HTTP_201_CREATED,
    )


@router.post('/client/verify', response_model=ApiResponse[ClientResponse])
@Logger.io
async def verify_client(
    request: VerifyClientRequest,
    use_case: VerifyClientUseCase = Depends(VerifyClientUseCase.depends),
) -> JSONResponse:
    client = await use_case.execute(email=request.email, code=request.code)
    return success(ClientResponse.from_entity(client), message='Account verified')


@router.post('/client/login', response_model=ApiResponse[TokenResponse])
@Logger.io
@inject
async def login_client(
    request: LoginClientRequest,
    use_case: LoginClientUseCase = Depends(LoginClientUseCase.depends),
    jwt_auth: JwtAuth = Depends(Provide[Container.jwt_auth]),
) -> JSONResponse:
    client = await use_case.execute(email=request.email, password=request.password)
    assert client.id is not None
    token = jwt_auth.create_token(subject=client.email, role=client.role, user_id=client.id)
    return success(
        TokenResponse(token=token, role=client.role, user_id=client.id), message='Logged in'
    )


@router.post('/admin/login', response_model=ApiResponse[TokenResponse])
@Logger.io
@inject
async def login_admin(
    request: LoginAdminRequest,
    use_case: LoginAdminUseCase = Depends(LoginAdminUseCase.depends),
    jwt_auth: JwtAuth = Depends(Provide[Container.jwt_auth]),
) -> JSONResponse:
    admin = await use_case.execute(username=request.username, password=request.password)
    assert admin.id is not None
    token = jwt_auth.create_token(subject=admin.username, role=admin.role, user_id=admin.id)
    return success(
        TokenResponse(token=token, role=admin.role, user_id=admin.id), message='Logged in'
    )


@router.post('/admin/recover', response_model=ApiResponse[None])
@Logger.io
async def request_admin_recovery(
    request: AdminRecoveryRequest,
    use_case: RequestAdminRecoveryUseCase = Depends(RequestAdminRecoveryUseCase.depends),
) -> JSONResponse:
    await use_case.execute(email=request.email)
    return success(message='Recovery code sent')


@router.post('/admin/reset-password', response_model=ApiResponse[None])
@Logger.io
async def reset_admin_password(
    request: AdminResetPasswordRequest,
    use_case: ResetAdminPasswordUseCase = Depends(ResetAdminPasswordUseCase.depends),
) -> JSONResponse:
    await use_case.execute(
        email=request.email, code=request.code, new_password=request.new_password
    )
    return success(message='Password updated')


@router.post('/refresh', response_model=ApiResponse[TokenResponse])
@Logger.io
@inject
async def refresh_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    jwt_auth: JwtAuth = Depends(Provide[Container.jwt_auth]),
) -> JSONResponse:
    """Exchange a token, expired or not, for a fresh one with the same claims."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError('Not authenticated')
    token = jwt_auth.refresh_token(credentials.credentials)
    claims = jwt_auth.decode_token(token)
    return success(
        TokenResponse(token=token, role=UserRole(claims['role']), user_id=int(claims['uid'])),
        message='Token refreshed',
    )
