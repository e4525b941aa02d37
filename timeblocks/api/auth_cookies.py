# timeblocks/api/auth_cookies.py
from flask import Response

from timeblocks.api.middlewares.auth_middleware import ACCESS_COOKIE, REFRESH_COOKIE
from timeblocks.config.settings import Settings
from timeblocks.core.logging import get_logger

logger = get_logger(__name__)


def _set_cookie(response: Response, settings: Settings, name: str, value: str, max_age: int) -> None:
    response.set_cookie(
        name,
        value,
        max_age=max(0, max_age),
        path="/",
        domain=settings.auth_cookie_domain or None,
        secure=settings.auth_cookie_secure,
        httponly=True,
        samesite=settings.auth_cookie_same_site,
    )


def set_auth_cookies(response: Response, settings: Settings, *, access_token: str, refresh_token: str) -> None:
    _set_cookie(response, settings, ACCESS_COOKIE, access_token, settings.access_ttl_seconds)
    _set_cookie(response, settings, REFRESH_COOKIE, refresh_token, settings.refresh_ttl_seconds)
    logger.debug(
        "auth_cookies_set",
        same_site=settings.auth_cookie_same_site,
        secure=settings.auth_cookie_secure,
        access_max_age=settings.access_ttl_seconds,
        refresh_max_age=settings.refresh_ttl_seconds,
    )


def clear_auth_cookies(response: Response, settings: Settings) -> None:
    _set_cookie(response, settings, ACCESS_COOKIE, "", 0)
    _set_cookie(response, settings, REFRESH_COOKIE, "", 0)
