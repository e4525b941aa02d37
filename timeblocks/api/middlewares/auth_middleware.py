from functools import wraps
from typing import Any, Callable, TypeVar

from flask import Flask, g, request

from timeblocks.api.components import get_components
from timeblocks.core.exceptions import ForbiddenError, InvalidTokenError, UnauthorizedError, UserNotFoundError
from timeblocks.core.logging import get_logger
from timeblocks.entities.user import AuthenticatedUser
from timeblocks.infrastructure.database.session import db_session
from timeblocks.repositories.user_repository import UserRepository

F = TypeVar("F", bound=Callable[..., Any])

ACCESS_COOKIE = "tb_access"
REFRESH_COOKIE = "tb_refresh"

logger = get_logger(__name__)


def _get_access_token() -> str | None:
    token = request.cookies.get(ACCESS_COOKIE)
    if token:
        return token

    auth = request.headers.get("Authorization", "")
    parts = auth.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def _resolve_user(token: str) -> AuthenticatedUser:
    claims = get_components().jwt_provider.decode_access(token)

    with db_session() as session:
        user = UserRepository(session).get_by_id(claims.subject)
        if user is None:
            raise UserNotFoundError()
        return AuthenticatedUser(id=user.id, email=user.email, role=user.role)


def authenticate_request() -> None:
    """Attach ``g.current_user`` when a valid access token is present.

    Never rejects the request itself: a missing or bad token leaves it
    unauthenticated and ``require_auth`` decides downstream.
    """
    g.current_user = None

    token = _get_access_token()
    if token is None:
        logger.debug("jwt_filter", path=request.path, method=request.method, reason="jwt_missing")
        return

    try:
        g.current_user = _resolve_user(token)
    except InvalidTokenError as e:
        logger.warning("jwt_filter", path=request.path, method=request.method, reason=f"jwt_{e.reason}")
    except UserNotFoundError:
        logger.warning("jwt_filter", path=request.path, method=request.method, reason="jwt_user_not_found")
    except Exception:
        logger.exception("jwt_filter", path=request.path, method=request.method, reason="jwt_lookup_failed")
    else:
        logger.debug(
            "jwt_filter",
            path=request.path,
            method=request.method,
            reason="valid",
            user_id=g.current_user.id,
        )


def register_request_authenticator(app: Flask) -> None:
    app.before_request(authenticate_request)


def current_user() -> AuthenticatedUser | None:
    return getattr(g, "current_user", None)


def require_auth(fn: F) -> F:
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if current_user() is None:
            raise UnauthorizedError("Authentication required.")
        return fn(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def require_roles(*allowed_roles: str):
    def decorator(fn: F) -> F:
        @wraps(fn)
        def wrapper(*args, **kwargs):
            user = current_user()
            if user is None:
                raise UnauthorizedError("Authentication required.")
            if user.role not in allowed_roles:
                raise ForbiddenError("Access denied.")
            return fn(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator
