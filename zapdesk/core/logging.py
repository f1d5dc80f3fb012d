import logging
import sys
from typing import Optional

from loguru import logger

from ..core.settings import settings

MINIMAL_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SS}</green> |"
    " <level>{level}</level> | <level>{message}</level>\n"
)
DEBUG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SS}</green> | <level>{level: <4}</level> |"
    " <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan>"
    " | <level>{message}</level>\n"
)

# standard library loggers we route through loguru
INTERCEPTED_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error", "httpx")


class InterceptHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(exception=record.exc_info).log(level, record.getMessage())


def _format(record) -> str:
    # records forwarded by InterceptHandler carry its location, not the caller's
    if record["function"] == "emit":
        return MINIMAL_FORMAT
    return DEBUG_FORMAT if settings.debug else MINIMAL_FORMAT


def configure_logger(level: Optional[str] = None) -> None:
    log_level = level or settings.log_level
    if settings.debug and log_level == "INFO":
        log_level = "DEBUG"

    logger.remove()
    logger.add(sys.stderr, level=log_level, format=_format)

    for name in INTERCEPTED_LOGGERS:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False
