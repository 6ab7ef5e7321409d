"""
Loguru logging setup.

One console sink, plus either a rotating file sink or a JSON sink
(loguru's serialize=True). Records emitted through the standard logging
module (uvicorn, httpx) are routed into loguru by InterceptHandler.
"""

import logging
import sys
from pathlib import Path

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {name} | {message}"

INTERCEPTED_LOGGERS = (
    "uvicorn",
    "uvicorn.access",
    "uvicorn.error",
    "fastapi",
    "httpx",
)


class InterceptHandler(logging.Handler):
    """Forward standard logging records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while (
            frame is not None
            and frame.f_code.co_filename == logging.__file__
        ):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging(
    log_level: str = "INFO",
    log_dir: str | None = "logs",
    json_logs: bool = False,
) -> None:
    logger.remove()
    logger.add(sys.stderr, level=log_level, format=CONSOLE_FORMAT)

    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        if json_logs:
            logger.add(
                path / "weathercompare.json",
                level=log_level,
                serialize=True,
                rotation="10 MB",
                retention="10 days",
            )
        else:
            logger.add(
                path / "weathercompare.log",
                level=log_level,
                format=FILE_FORMAT,
                rotation="10 MB",
                retention="10 days",
            )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in INTERCEPTED_LOGGERS:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False


def get_logger():
    return logger
