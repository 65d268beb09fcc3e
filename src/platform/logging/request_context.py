"""
Per-request log context

Every log line carries the service identity and, inside an HTTP request, the request id
that is echoed back in the ``X-Request-ID`` header and reused as the correlation id of
INTERNAL errors.
"""

from contextvars import ContextVar, Token
from functools import lru_cache
import os

from uuid_utils import uuid7

from src.platform.config.core_setting import settings


REQUEST_ID_HEADER = 'X-Request-ID'

request_id_var: ContextVar[str] = ContextVar('request_id_var', default='-')


@lru_cache(maxsize=1)
def get_service_context() -> str:
    instance = os.getenv('HOSTNAME') or str(os.getpid())
    return f'{settings.SERVICE_NAME}@{settings.DEPLOY_ENV}:{instance}'


def bind_request_id(request_id: str | None = None) -> Token[str]:
    return request_id_var.set(request_id or str(uuid7()))


def reset_request_id(token: Token[str]) -> None:
    request_id_var.reset(token)


def current_request_id() -> str | None:
    request_id = request_id_var.get()
    return None if request_id == '-' else request_id
