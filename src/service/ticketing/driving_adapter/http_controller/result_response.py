"""
Translate use case results into the response envelope

Engine operations return ``Ok | Err`` instead of raising; everything else raises and is
handled by the registered exception handlers. Both paths end in the same envelope.
"""

from typing import Any, Callable, Sequence, TypeVar

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.platform.exception.exception_handlers import error_envelope
from src.platform.exception.result import Err, Ok


T = TypeVar('T')


def _dump(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode='json', by_alias=True)
    if isinstance(data, Sequence) and not isinstance(data, (str, bytes)):
        return [_dump(item) for item in data]
    return data


def success(
    data: Any = None, *, message: str, status_code: int = status.HTTP_200_OK
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={'status': 'Success', 'message': message, 'data': _dump(data)},
    )


def failure(err: Err) -> JSONResponse:
    extra = {'correlationId': err.correlation_id} if err.correlation_id else None
    return error_envelope(
        status_code=err.status_code, kind=err.kind, message=err.message, extra=extra
    )


def respond(
    result: Ok[T] | Err,
    *,
    message: str,
    to_schema: Callable[[T], Any],
    status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    match result:
        case Ok(value=value):
            return success(to_schema(value), message=message, status_code=status_code)
        case Err() as err:
            return failure(err)
