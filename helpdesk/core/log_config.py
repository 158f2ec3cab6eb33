import logging
import sys
import time
import uuid
from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from helpdesk.core.config import settings

REQUEST_ID_HEADER = "X-Request-ID"

# Polled by load balancers; logging them only adds noise
UNLOGGED_PATHS: frozenset[str] = frozenset({"/health"})

NOISY_LOGGERS: dict[str, int] = {
    "uvicorn.access": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
    "passlib": logging.ERROR,
}


def setup_logging(level: str | None = None) -> None:
    """Route structlog and stdlib records through one stdout handler.

    ``DEBUG`` switches to the console renderer. Otherwise every line is a JSON
    object and tracebacks are rendered into its ``exception`` field.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    render_processors: list[Any] = [structlog.stdlib.ProcessorFormatter.remove_processors_meta]
    if settings.DEBUG:
        render_processors.append(structlog.dev.ConsoleRenderer())
    else:
        render_processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=render_processors,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.getLevelName(level_name))

    for name, noisy_level in NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(noisy_level)


def request_log_level(status_code: int) -> str:
    """Server errors log as ``error``, client errors as ``warning``."""
    if status_code >= 500:
        return "error"
    if status_code >= 400:
        return "warning"
    return "info"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status, and duration.

    A request id (taken from ``X-Request-ID`` or generated) is bound into the
    structlog context together with the method and path, so service-level log
    lines of the same call carry them. The id is echoed in the response.
    An exception escaping the app is logged with its traceback and re-raised.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        logger = structlog.get_logger("http")
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        start = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "request_failed",
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            raise

        response.headers[REQUEST_ID_HEADER] = request_id
        if request.url.path in UNLOGGED_PATHS:
            return response

        log = getattr(logger, request_log_level(response.status_code))
        log(
            "request",
            status=response.status_code,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
            client=request.client.host if request.client else "unknown",
        )

        return response
