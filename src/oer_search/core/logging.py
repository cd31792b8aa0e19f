"""
Logging Configuration

Installs the process-wide logging setup and the per-request access log.
"""

from __future__ import annotations

import logging
import time
from logging.config import dictConfig
from typing import Any, Dict, Optional

from fastapi import Request

requestLogger = logging.getLogger("oer.request")


def build_log_config(level: str = "INFO", log_file: Optional[str] = None) -> Dict[str, Any]:
    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": "default",
            "stream": "ext://sys.stdout",
        },
    }
    if log_file:
        handlers["file"] = {
            "class": "logging.FileHandler",
            "level": level,
            "formatter": "default",
            "filename": log_file,
            "mode": "a",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s\t[%(levelname)s]\t%(name)s\t%(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": handlers,
        "loggers": {
            "oer": {"level": level},
        },
        "root": {"handlers": list(handlers), "level": "WARNING"},
    }


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    dictConfig(build_log_config(level.upper(), log_file))


async def log_requests(request: Request, call_next):
    """
    HTTP middleware writing one access line per request.
    """
    start_time = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start_time) * 1000
    requestLogger.info(
        "%s %s %s %.1fms",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
    )
    return response
