from inspect import getfile, getsourcelines, signature, unwrap
from os.path import basename
import re
from time import time
from typing import Any, Callable

from src.platform.logging.loguru_io_config import (
    SENSITIVE_KEYWORDS,
    call_depth_var,
    chain_start_time_var,
)


_MASK = '********'
_MAX_CONTENT_LENGTH = 500
_SENSITIVE_PATTERN = re.compile(
    r"(\b(?:{})\b)(\s*[=:]\s*)('[^']*'|\"[^\"]*\"|[^,\s)]+)".format(
        '|'.join(sorted(SENSITIVE_KEYWORDS))
    )
)
_SKIPPED_PARAMETERS = frozenset({'self', 'cls'})


def get_chain_start_time() -> float:
    if not (start_time := chain_start_time_var.get()):
        start_time = time()
        chain_start_time_var.set(start_time)
    return start_time


def build_call_target_func_path(func: Callable[..., Any]) -> str:
    func = unwrap(func)
    try:
        lineno = getsourcelines(func)[1]
    except (OSError, TypeError):
        lineno = 0
    return f'{basename(getfile(getattr(func, "__func__", func)))}::{func.__qualname__}:{lineno}'


def reset_call_depth() -> None:
    layer = call_depth_var.get() - 1
    call_depth_var.set(layer)
    if not layer:
        chain_start_time_var.set(0)


def bind_arguments(func: Callable[..., Any], *args: Any, **kwargs: Any) -> dict[str, Any]:
    """
    Name every argument of the call for the log line, ``self``/``cls`` left out.
    A call that does not fit the signature is logged as given; the call itself fails later.
    """
    try:
        bound = signature(unwrap(func)).bind(*args, **kwargs)
    except (TypeError, ValueError):
        return {'args': args, **kwargs}
    return {
        name: value
        for name, value in bound.arguments.items()
        if name not in _SKIPPED_PARAMETERS
    }


def mask_sensitive(data: Any) -> Any:
    """Mask `key=value` fragments whose key is sensitive inside a repr."""
    try:
        data_str = str(data)
    except Exception:
        return data
    masked = _SENSITIVE_PATTERN.sub(rf"\1\2'{_MASK}'", data_str)
    return data if masked == data_str else masked


def should_mask_keyword(keyword: Any, value: Any) -> Any:
    return _MASK if keyword in SENSITIVE_KEYWORDS else value


def truncate_content(data: Any) -> Any:
    data_str = data if isinstance(data, str) else repr(data)
    if len(data_str) <= _MAX_CONTENT_LENGTH:
        return data
    return f'{data_str[:_MAX_CONTENT_LENGTH]}...(+{len(data_str) - _MAX_CONTENT_LENGTH} chars)'
