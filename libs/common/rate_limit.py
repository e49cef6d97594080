"""Request throttling for the dashboard API (slowapi).

Limits live in process memory unless RATE_LIMIT_STORAGE_URI points at a
shared backend such as Redis.
"""

from typing import Callable

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from libs.common.config import get_settings

DEFAULT_LIMIT = "100/minute"


def client_address(request: Request) -> str:
    """First hop of X-Forwarded-For when behind a proxy, else the peer address."""
    forwarded = request.headers.get("X-Forwarded-For", "")
    first_hop = forwarded.split(",")[0].strip()
    return first_hop or get_remote_address(request)


def store_client_key(request: Request) -> str:
    """Throttle key scoped to the store a checkout call targets."""
    store_id = request.path_params.get("store_id", "-")
    return f"{store_id}:{client_address(request)}"


def build_limiter() -> Limiter:
    return Limiter(
        key_func=client_address,
        default_limits=[DEFAULT_LIMIT],
        storage_uri=get_settings().RATE_LIMIT_STORAGE_URI,
        strategy="fixed-window",
    )


limiter = build_limiter()


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    return JSONResponse(
        status_code=429,
        content={"detail": f"Too many requests ({exc.detail})", "code": "RATE_LIMITED"},
        headers={"Retry-After": "60"},
    )


def coupon_limit(func: Callable) -> Callable:
    """Throttle coupon code guessing on checkout validation endpoints."""
    return limiter.limit(
        get_settings().COUPON_VALIDATION_RATE_LIMIT, key_func=store_client_key
    )(func)
