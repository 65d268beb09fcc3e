"""
Result types for operations whose public contract is total.

Use cases decorated with ``@returns_result`` never raise: a domain failure becomes
``Err(kind, message)`` and anything unexpected becomes ``Err(INTERNAL)`` with a
correlation id that is written to the log instead of leaking to the caller.

Usage:
    result = await reserve_use_case.execute(client_id=1, ...)
    match result:
        case Ok(value=cart): ...
        case Err(kind=ErrorKind.INSUFFICIENT_CAPACITY): ...
"""

from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, Generic, ParamSpec, TypeVar

import attrs
from uuid_utils import uuid7

from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import CustomBaseError
from src.platform.logging.loguru_io import Logger
from src.platform.logging.request_context import current_request_id


T = TypeVar('T')
P = ParamSpec('P')


@attrs.define(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_ok(self) -> bool:
        return True


@attrs.define(frozen=True)
class Err:
    kind: ErrorKind
    message: str
    correlation_id: str | None = None

    @property
    def is_ok(self) -> bool:
        return False

    @property
    def status_code(self) -> int:
        return self.kind.http_status

    @classmethod
    def from_error(cls, error: CustomBaseError) -> 'Err':
        return cls(kind=error.kind, message=error.message)


Result = Ok[T] | Err


def returns_result(
    func: Callable[P, Awaitable[T]],
) -> Callable[P, Awaitable[Ok[T] | Err]]:
    @wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> Ok[T] | Err:
        try:
            return Ok(await func(*args, **kwargs))
        except CustomBaseError as e:
            return Err.from_error(e)
        except Exception as e:
            correlation_id = current_request_id() or str(uuid7())
            Logger.base.opt(exception=e).error(
                f'💥 [INTERNAL] correlation_id={correlation_id} {type(e).__name__}: {e}'
            )
            return Err(
                kind=ErrorKind.INTERNAL,
                message='Internal server error',
                correlation_id=correlation_id,
            )

    return wrapper


def unwrap(result: Ok[T] | Err) -> T:
    """Return the value or raise the error back as an exception."""
    if isinstance(result, Ok):
        return result.value
    raise CustomBaseError(result.message, result.kind)


def map_ok(result: Ok[T] | Err, fn: Callable[[T], Any]) -> Ok[Any] | Err:
    return Ok(fn(result.value)) if isinstance(result, Ok) else result
