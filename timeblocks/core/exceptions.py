# timeblocks/core/exceptions.py

class AppError(Exception):
    error_code = "bad_request"

    def __init__(self, message: str, *, status_code: int = 400, error_code: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        if error_code is not None:
            self.error_code = error_code


class NotFoundError(AppError):
    error_code = "not_found"

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, status_code=404)


class ConflictError(AppError):
    error_code = "conflict"

    def __init__(self, message: str = "Conflict") -> None:
        super().__init__(message, status_code=409)


class UnauthorizedError(AppError):
    error_code = "unauthorized"

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message, status_code=401)


class ForbiddenError(AppError):
    error_code = "forbidden"

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message, status_code=403)


# -------------------------
# Authentication
# -------------------------

class BadCredentialsError(UnauthorizedError):
    error_code = "bad_credentials"

    def __init__(self, message: str = "Invalid email or password") -> None:
        super().__init__(message)


class EmailNotVerifiedError(ForbiddenError):
    error_code = "email_not_verified"

    def __init__(self, message: str = "Email not verified") -> None:
        super().__init__(message)


class EmailTakenError(ConflictError):
    error_code = "email_taken"

    def __init__(self, message: str = "Email already registered") -> None:
        super().__init__(message)


class UserNotFoundError(AppError):
    # Reported like a bad code so verify/reset flows do not reveal accounts.
    error_code = "invalid_code"

    def __init__(self, message: str = "Invalid or expired code") -> None:
        super().__init__(message, status_code=400)


class InvalidCodeError(AppError):
    error_code = "invalid_code"

    def __init__(self, message: str = "Invalid or expired code") -> None:
        super().__init__(message, status_code=400)


class CodeExpiredError(AppError):
    error_code = "code_expired"

    def __init__(self, message: str = "Code expired") -> None:
        super().__init__(message, status_code=400)


class InvalidTokenError(UnauthorizedError):
    """Any refresh/access token failure.

    ``reason`` is an internal tag (expired, malformed, unknown, mismatch,
    unknown_token, ...) used for logging; clients only ever see
    ``invalid_token``.
    """

    error_code = "invalid_token"

    def __init__(self, reason: str = "malformed", message: str = "Invalid or expired token") -> None:
        super().__init__(message)
        self.reason = reason


class TokenReplayDetectedError(InvalidTokenError):
    def __init__(self, *, token_id: str, user_id: str) -> None:
        super().__init__(reason="reuse_detected")
        self.token_id = token_id
        self.user_id = user_id


class RateLimitedError(AppError):
    error_code = "rate_limited"

    def __init__(self, message: str = "Too many requests") -> None:
        super().__init__(message, status_code=429)
