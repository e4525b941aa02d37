from functools import wraps
from typing import Any, Callable, TypeVar

from flask import request

from timeblocks.api.components import get_components
from timeblocks.core.exceptions import RateLimitedError
from timeblocks.core.logging import get_logger

F = TypeVar("F", bound=Callable[..., Any])

logger = get_logger(__name__)


def client_key() -> str:
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded.strip():
        return forwarded.split(",")[0].strip()
    return request.remote_addr or "unknown"


def enforce_rate_limit(key: str) -> None:
    if not get_components().rate_limiter.try_consume(key):
        logger.warning("auth_throttled", key=key, path=request.path)
        raise RateLimitedError()


def rate_limited(action: str, key_func: Callable[[], str] = client_key):
    """Gate a view on the fixed-window limiter under ``"<action>:<key>"``."""

    def decorator(fn: F) -> F:
        @wraps(fn)
        def wrapper(*args, **kwargs):
            enforce_rate_limit(f"{action}:{key_func()}")
            return fn(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator
