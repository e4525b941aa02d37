# timeblocks/api/middlewares/error_handler.py
from flask import Flask, current_app, jsonify
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException

from timeblocks.core.exceptions import AppError, InvalidTokenError, TokenReplayDetectedError
from timeblocks.core.logging import get_logger

logger = get_logger(__name__)


def _error_body(code: str, message: str, **extra):
    body = {"error": code, "message": message}
    body.update(extra)
    return jsonify(body)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(AppError)
    def handle_app_error(err: AppError):
        if isinstance(err, TokenReplayDetectedError):
            # flagged server side only; the client gets a plain invalid_token
            logger.warning("token_replay_rejected", token_id=err.token_id, user_id=err.user_id)
        elif isinstance(err, InvalidTokenError):
            logger.info("invalid_token_rejected", reason=err.reason)

        response = _error_body(err.error_code, str(err))
        if err.status_code == 401:
            response.headers["WWW-Authenticate"] = "Bearer"
        return response, err.status_code

    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        fields = {".".join(str(p) for p in e["loc"]) or "body": e["msg"] for e in err.errors()}
        return _error_body("validation_error", "Invalid request body", fields=fields), 400

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        code = (err.name or "http_error").lower().replace(" ", "_")
        return _error_body(code, err.description or err.name), err.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        logger.exception("unhandled_exception", error_type=type(err).__name__)

        if current_app.debug:
            return _error_body("server_error", str(err)), 500

        return _error_body("server_error", "Unexpected server error"), 500
