"""
Loguru setup, done once at import time.

Every record carries the service context, the `Logger.io` call target and the
start time of the outermost traced call, so one request can be followed across
use case and repository frames. Standard-library logging (granian, SQLAlchemy,
asyncio) is routed into the same sinks.
"""

from contextvars import ContextVar
from datetime import datetime, timezone
from enum import StrEnum
import logging
import os
import re
import sys
from typing import TYPE_CHECKING

from loguru import logger as loguru_logger


if TYPE_CHECKING:
    from loguru import Logger as LoguruLogger

from eventbook.platform.config.core_setting import settings
from eventbook.platform.constant.path import LOG_DIR
from eventbook.platform.logging.service_context import get_service_context


LOG_DIR = os.environ.get('TEST_LOG_DIR', LOG_DIR)

SENSITIVE_KEYWORDS = frozenset({'password', 'token', 'secret_key', 'authorization'})

chain_start_time_var: ContextVar[float] = ContextVar('chain_start_time', default=0)
call_depth_var: ContextVar[int] = ContextVar('call_depth', default=0)


class ExtraField(StrEnum):
    SERVICE_CONTEXT = 'service_context'
    CHAIN_START_TIME = 'chain_start_time'
    CALL_TARGET = 'call_target'


# granian access line: '127.0.0.1 - "PATCH /api/booking/... HTTP/1.1" - 409 - 3ms'
_ACCESS_LINE = re.compile(r'"[A-Z]+ \S+ HTTP/[\d.]+" - (?P<status>\d{3})\b')
_STATUS_LEVELS = ((500, 'CRITICAL'), (400, 'ERROR'), (300, 'WARNING'), (200, 'SUCCESS'))

# Libraries that narrate every call at DEBUG
_QUIET_DEBUG_LOGGERS = ('aiosqlite', 'asyncio')


def access_log_level(message: str) -> str | None:
    """Level for a granian access line, picked from its HTTP status. None for other lines."""
    match = _ACCESS_LINE.search(message)
    if not match:
        return None
    status = int(match.group('status'))
    return next((level for floor, level in _STATUS_LEVELS if status >= floor), 'INFO')


def _bind_context(base: 'LoguruLogger') -> 'LoguruLogger':
    return base.bind(
        **{
            ExtraField.SERVICE_CONTEXT: get_service_context(),
            ExtraField.CHAIN_START_TIME: '',
            ExtraField.CALL_TARGET: '',
        }
    )


def _record_format() -> str:
    return ' | '.join(
        (
            '<g>{time:YYYY-MM-DD HH:mm:ss.SSS}</>',
            '<lvl>{level:<8}</>',
            f'<c>{{extra[{ExtraField.SERVICE_CONTEXT}]}}</>',
            f'<c>{{name}}:{{function}}:{{line}}</> <y>{{extra[{ExtraField.CALL_TARGET}]}}</>',
            '{message}',
            f'<lk>chain@{{extra[{ExtraField.CHAIN_START_TIME}]}}</>',
        )
    )


class InterceptHandler(logging.Handler):
    """Forward standard-library records to loguru, keeping the original caller."""

    def emit(self, record: logging.LogRecord) -> None:
        if record.levelno <= logging.DEBUG and record.name.startswith(_QUIET_DEBUG_LOGGERS):
            return

        message = record.getMessage()
        level: str | int | None = access_log_level(message)
        if level is None:
            try:
                level = loguru_logger.level(record.levelname).name
            except ValueError:
                level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore[assignment]
            depth += 1

        custom_logger.opt(depth=depth, exception=record.exc_info).log(level, message)


def _configure(logger: 'LoguruLogger') -> None:
    level = 'DEBUG' if settings.DEBUG else 'INFO'
    record_format = _record_format()

    logger.add(sys.stdout, format=record_format, level=level, enqueue=True)

    # Local and test runs also keep daily files; deployed services log to stdout only
    if settings.DEBUG:
        prefix = 'test_' if os.environ.get('TEST_LOG_DIR') else ''
        day = datetime.now(timezone.utc).strftime('%Y-%m-%d')
        logger.add(
            f'{LOG_DIR}/{prefix}eventbook_{day}.log',
            format=record_format,
            level=level,
            rotation='00:00',
            retention='14 days',
            compression='gz',
            enqueue=True,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)


loguru_logger.remove()
custom_logger = _bind_context(loguru_logger)
_configure(custom_logger)
