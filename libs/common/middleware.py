"""Request tracing for the dashboard API.

Every request gets an id (taken from ``X-Request-ID`` when the caller sends
one) that is bound to the logging context and echoed back on the response.
Store-scoped routes also log the store id they target.
"""

import re
import time
from typing import Callable, Optional

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from libs.common.logging import (
    clear_request_context,
    configure_logging,
    get_logger,
    set_request_context,
)

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
QUIET_PATHS = frozenset({"/health", "/docs", "/openapi.json"})

_STORE_PATH = re.compile(r"^/api/stores/([^/]+)")


def _store_id_from_path(path: str) -> Optional[str]:
    match = _STORE_PATH.match(path)
    return match.group(1) if match else None


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind a request id to the logging context and log each call's outcome."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        request_id = set_request_context(
            request_id=request.headers.get(REQUEST_ID_HEADER),
            path=path,
            method=request.method,
        )
        quiet = path in QUIET_PATHS
        fields = {"store_id": _store_id_from_path(path)}
        started = time.perf_counter()
        if not quiet:
            logger.debug(f"{request.method} {path} started", extra={"extra_fields": fields})

        try:
            response = await call_next(request)
        except Exception:
            fields["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
            logger.exception("Unhandled error", extra={"extra_fields": fields})
            raise
        else:
            if not quiet:
                fields["status_code"] = response.status_code
                fields["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
                level = logger.warning if response.status_code >= 400 else logger.info
                level(f"{request.method} {path}", extra={"extra_fields": fields})
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            clear_request_context()


def add_observability_middleware(app: FastAPI) -> None:
    """Configure logging and install request tracing on ``app``."""
    configure_logging()
    app.add_middleware(RequestContextMiddleware)
