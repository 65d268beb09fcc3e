from typing import Optional

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.exception.exceptions import AuthenticationError, ForbiddenError
from src.service.ticketing.domain.enum.user_role import UserRole
from src.service.ticketing.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


bearer_scheme = HTTPBearer(auto_error=False)


@attrs.frozen
class Principal:
    user_id: int
    subject: str
    role: UserRole


@inject
async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    jwt_auth: JwtAuth = Depends(Provide[Container.jwt_auth]),
) -> Principal:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError('Not authenticated')

    payload = jwt_auth.decode_token(credentials.credentials)
    try:
        return Principal(
            user_id=int(payload['uid']), subject=payload['sub'], role=UserRole(payload['role'])
        )
    except (KeyError, TypeError, ValueError):
        raise AuthenticationError('Invalid token')


async def require_client(principal: Principal = Depends(get_current_principal)) -> Principal:
    if principal.role != UserRole.CLIENT:
        raise ForbiddenError('Only clients can perform this action')
    return principal


async def require_self(
    request: Request, principal: Principal = Depends(get_current_principal)
) -> Principal:
    """The path's ``client_id`` must be the caller's own id"""
    tracer = trace.get_tracer(__name__)
    with tracer.start_as_current_span(
        'auth.require_self',
        attributes={'user.id': principal.user_id, 'user.role': principal.role.value},
    ):
        if principal.role != UserRole.CLIENT:
            raise ForbiddenError('Only clients can perform this action')
        if str(principal.user_id) != str(request.path_params.get('client_id')):
            raise ForbiddenError('Clients may only act on their own resources')
        return principal


async def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    if principal.role != UserRole.ADMIN:
        raise ForbiddenError('Only admins can perform this action')
    return principal
