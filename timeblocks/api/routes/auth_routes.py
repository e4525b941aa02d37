# timeblocks/api/routes/auth_routes.py
from flask import Blueprint, jsonify, make_response, request

from timeblocks.api.auth_cookies import clear_auth_cookies, set_auth_cookies
from timeblocks.api.components import get_components
from timeblocks.api.middlewares.auth_middleware import REFRESH_COOKIE, current_user, require_auth
from timeblocks.api.middlewares.rate_limit import rate_limited
from timeblocks.api.schemas._datetime_serializer import serialize_dt
from timeblocks.api.schemas.auth_schema import (
    AuthResponse,
    LoginRequest,
    RequestPasswordResetRequest,
    ResetPasswordRequest,
    SignupRequest,
    UserResponse,
    VerifyEmailRequest,
)
from timeblocks.core.exceptions import InvalidTokenError, NotFoundError
from timeblocks.core.logging import get_logger
from timeblocks.infrastructure.database.session import db_session
from timeblocks.repositories.user_repository import UserRepository, normalize_email
from timeblocks.services.auth_service import LoginResult

bp_auth = Blueprint("auth", __name__)

logger = get_logger(__name__)


def _json_body() -> dict:
    return request.get_json(force=True, silent=False) or {}


def _reset_email_key() -> str:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return ""
    return normalize_email(str(body.get("email", "")))


def _session_response(body: dict, result: LoginResult):
    response = make_response(jsonify(body), 200)
    set_auth_cookies(
        response,
        get_components().settings,
        access_token=result.access_token,
        refresh_token=result.refresh.raw_token,
    )
    return response


@bp_auth.post("/signup")
@rate_limited("signup")
def signup():
    payload = SignupRequest.model_validate(_json_body())

    with db_session() as session:
        get_components().auth_service(session).signup(
            email=payload.email,
            password=payload.password,
            name=payload.name,
        )

    return jsonify({"status": "verification_required"}), 201


@bp_auth.post("/verify-email")
def verify_email():
    payload = VerifyEmailRequest.model_validate(_json_body())

    with db_session() as session:
        result = get_components().auth_service(session).verify_email(email=payload.email, code=payload.code)

    return jsonify(
        {
            "verified": True,
            "alreadyVerified": result.already_verified,
            "verifiedAt": serialize_dt(result.verified_at),
        }
    ), 200


@bp_auth.post("/login")
@rate_limited("login")
def login():
    payload = LoginRequest.model_validate(_json_body())

    with db_session() as session:
        result = get_components().auth_service(session).login(email=payload.email, password=payload.password)
        body = AuthResponse(user=UserResponse.model_validate(result.user)).model_dump(mode="json")

    return _session_response(body, result)


@bp_auth.post("/refresh")
def refresh():
    raw_token = request.cookies.get(REFRESH_COOKIE)
    if not raw_token:
        raise InvalidTokenError("missing")

    with db_session() as session:
        result = get_components().auth_service(session).refresh(raw_token)

    return _session_response({"status": "refreshed"}, result)


@bp_auth.post("/logout")
def logout():
    components = get_components()
    raw_token = request.cookies.get(REFRESH_COOKIE)

    if raw_token:
        try:
            claims = components.jwt_provider.decode_refresh(raw_token)
        except InvalidTokenError as e:
            logger.debug("logout_refresh_cookie_unreadable", reason=e.reason)
        else:
            with db_session() as session:
                record = components.refresh_token_service(session).find_by_id(claims.token_id)
                if record is not None and record.user_id == claims.subject:
                    components.auth_service(session).logout(record)

    response = make_response(jsonify({"status": "logged_out"}), 200)
    clear_auth_cookies(response, components.settings)
    return response


@bp_auth.post("/request-password-reset")
@rate_limited("pwdreset", key_func=_reset_email_key)
def request_password_reset():
    payload = RequestPasswordResetRequest.model_validate(_json_body())

    with db_session() as session:
        get_components().auth_service(session).request_password_reset(email=payload.email)

    return jsonify({"status": "reset_requested"}), 200


@bp_auth.post("/reset-password")
@rate_limited("pwdreset-confirm")
def reset_password():
    payload = ResetPasswordRequest.model_validate(_json_body())

    with db_session() as session:
        get_components().auth_service(session).reset_password(
            email=payload.email,
            code=payload.code,
            new_password=payload.new_password,
        )

    return jsonify({"status": "password_updated"}), 200


@bp_auth.get("/me")
@require_auth
def me():
    with db_session() as session:
        user = UserRepository(session).get_by_id(current_user().id)
        if user is None:
            raise NotFoundError("User not found.")
        payload = AuthResponse(user=UserResponse.model_validate(user))

    return jsonify(payload.model_dump(mode="json")), 200
