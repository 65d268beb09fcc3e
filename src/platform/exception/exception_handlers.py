from typing import Any, Callable, Coroutine

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response
from uuid_utils import uuid7

from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import CustomBaseError
from src.platform.logging.loguru_io import Logger
from src.platform.logging.request_context import current_request_id

# Type alias for exception handlers (compatible with Starlette's expected signature)
ExceptionHandler = Callable[[Request, Exception], Coroutine[Any, Any, Response]]


def error_envelope(
    *, status_code: int, kind: ErrorKind, message: str, extra: dict[str, Any] | None = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            'status': 'Error',
            'message': message,
            'data': {'kind': kind.value, **(extra or {})},
        },
    )


async def custom_error_handler(request: Request, exc: Exception) -> JSONResponse:
    error = (
        exc if isinstance(exc, CustomBaseError) else CustomBaseError(str(exc), ErrorKind.INTERNAL)
    )
    return error_envelope(status_code=error.status_code, kind=error.kind, message=error.message)


async def value_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return error_envelope(
        status_code=status.HTTP_400_BAD_REQUEST, kind=ErrorKind.VALIDATION_ERROR, message=str(exc)
    )


async def validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    error = exc if isinstance(exc, RequestValidationError) else RequestValidationError([])
    return error_envelope(
        status_code=status.HTTP_400_BAD_REQUEST,
        kind=ErrorKind.VALIDATION_ERROR,
        message='Request validation failed',
        extra={'errors': jsonable_errors(error.errors())},
    )


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    error = exc if isinstance(exc, StarletteHTTPException) else StarletteHTTPException(500)
    kind = {
        status.HTTP_401_UNAUTHORIZED: ErrorKind.AUTH_UNAUTHORIZED,
        status.HTTP_403_FORBIDDEN: ErrorKind.AUTH_FORBIDDEN,
    }.get(error.status_code, ErrorKind.VALIDATION_ERROR)
    return error_envelope(status_code=error.status_code, kind=kind, message=str(error.detail))


async def general_500_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    correlation_id = current_request_id() or str(uuid7())
    Logger.base.opt(exception=exc).error(
        f'💥 [INTERNAL] correlation_id={correlation_id} {request.method} {request.url.path}'
    )
    return error_envelope(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        kind=ErrorKind.INTERNAL,
        message='Internal server error',
        extra={'correlationId': correlation_id},
    )


def jsonable_errors(errors: Any) -> list[dict[str, Any]]:
    """Pydantic error contexts may hold exception objects that are not JSON serializable."""
    return [
        {'loc': list(err.get('loc', ())), 'msg': err.get('msg', ''), 'type': err.get('type', '')}
        for err in errors
    ]


# Exception handler mapping
EXCEPTION_HANDLERS: dict[type[Exception], ExceptionHandler] = {
    CustomBaseError: custom_error_handler,
    ValueError: value_error_handler,
    RequestValidationError: validation_error_handler,
    StarletteHTTPException: http_exception_handler,
    Exception: general_500_exception_handler,  # Catch-all for unhandled exceptions
}


def register_exception_handlers(app: FastAPI) -> None:
    for exception_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exception_class, handler)
