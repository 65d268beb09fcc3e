from contextvars import ContextVar
from enum import StrEnum
import logging
from pathlib import Path
import sys
from typing import TYPE_CHECKING, Any

from loguru import logger as loguru_logger


if TYPE_CHECKING:
    from loguru import Logger as LoguruLogger

from src.platform.config.core_setting import settings
from src.platform.logging.request_context import get_service_context, request_id_var


SENSITIVE_KEYWORDS = {
    'password',
    'new_password',
    'hashed_password',
    'password_hash',
    'access_token',
    'token',
    'authorization',
    'verification_code',
    'recovery_code',
    'code',
    'webhook_secret',
}

# Chatty third-party loggers kept at WARNING
QUIET_LOGGERS = ('asyncio', 'httpcore', 'httpx', 'aiosqlite', 'sqlalchemy.engine')

chain_start_time_var: ContextVar[float] = ContextVar('chain_start_time_var', default=0)
call_depth_var: ContextVar[int] = ContextVar('call_depth_var', default=0)


class ExtraField(StrEnum):
    SERVICE_CONTEXT = 'service_context'
    REQUEST_ID = 'request_id'
    CHAIN_START_TIME = 'chain_start_time'
    CALL_TARGET = 'call_target'


def _attach_request_id(record: Any) -> None:
    record['extra'][ExtraField.REQUEST_ID] = request_id_var.get()


class InterceptHandler(logging.Handler):
    """Route stdlib logging (granian, sqlalchemy, httpx) through the loguru sinks."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = loguru_logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore
            depth += 1

        custom_logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


io_log_format = ' | '.join(
    (
        '<g>{time:YYYY-MM-DD HH:mm:ss.SSS}</>',
        f'<c>{{extra[{ExtraField.SERVICE_CONTEXT}]}}</>',
        f'<m>{{extra[{ExtraField.REQUEST_ID}]}}</>',
        '<lvl>{level:<8}</>',
        f'<c>{{file}}::{{function}}:{{line}}</>=><y>{{extra[{ExtraField.CALL_TARGET}]}}</>',
        '{message}',
        f'<lk>{{extra[{ExtraField.CHAIN_START_TIME}]:<18}}</>',
    )
)


def resolve_log_level() -> str:
    if settings.LOG_LEVEL:
        return settings.LOG_LEVEL.upper()
    return 'DEBUG' if settings.DEBUG else 'INFO'


def configure_sinks(logger: 'LoguruLogger', *, level: str, log_dir: str) -> None:
    logger.add(sys.stdout, format=io_log_format, level=level, enqueue=True)
    if not log_dir:
        return
    Path(log_dir).mkdir(parents=True, exist_ok=True)
    logger.add(
        str(Path(log_dir) / f'{settings.SERVICE_NAME}_{{time:YYYY-MM-DD_HH}}.log'),
        format=io_log_format,
        rotation='1 hour',
        retention=settings.LOG_RETENTION,
        compression='gz',
        enqueue=True,
        level=level,
    )


loguru_logger.remove()
loguru_logger.configure(patcher=_attach_request_id)
custom_logger: 'LoguruLogger' = loguru_logger.bind(
    **{
        ExtraField.SERVICE_CONTEXT: get_service_context(),
        ExtraField.CHAIN_START_TIME: '',
        ExtraField.CALL_TARGET: '',
    }
)

configure_sinks(custom_logger, level=resolve_log_level(), log_dir=settings.LOG_DIR)

logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
for _name in QUIET_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)
