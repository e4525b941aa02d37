# timeblocks/services/auth_service.py

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import NoReturn
from uuid import uuid4

from timeblocks.core.clock import Clock, utcnow
from timeblocks.core.exceptions import (
    BadCredentialsError,
    CodeExpiredError,
    EmailNotVerifiedError,
    EmailTakenError,
    InvalidCodeError,
    InvalidTokenError,
    TokenReplayDetectedError,
    UserNotFoundError,
)
from timeblocks.core.interfaces.auth_notifier import AuthNotifier
from timeblocks.core.logging import get_logger
from timeblocks.infrastructure.database.models.one_time_code_model import (
    PURPOSE_EMAIL_VERIFICATION,
    PURPOSE_PASSWORD_RESET,
    OneTimeCodeModel,
)
from timeblocks.infrastructure.database.models.refresh_token_model import RefreshTokenModel
from timeblocks.infrastructure.database.models.user_model import ROLE_USER, UserModel
from timeblocks.infrastructure.security.hashing import sha256_hex
from timeblocks.infrastructure.security.jwt_provider import JwtProvider
from timeblocks.infrastructure.security.password_hasher import PasswordHasher
from timeblocks.repositories.one_time_code_repository import OneTimeCodeRepository
from timeblocks.repositories.user_repository import UserRepository, normalize_email
from timeblocks.services.refresh_token_service import IssuedRefreshToken, RefreshTokenService

logger = get_logger(__name__)


@dataclass(frozen=True)
class LoginResult:
    user: UserModel
    access_token: str
    refresh: IssuedRefreshToken


@dataclass(frozen=True)
class VerificationResult:
    already_verified: bool
    verified_at: datetime


class AuthService:
    """Session lifecycle: signup, e-mail verification, login, refresh
    rotation with reuse detection, logout and password reset.

    Runs inside one unit of work (``db_session``); the repositories it is
    given share that session.
    """

    def __init__(
        self,
        *,
        users: UserRepository,
        codes: OneTimeCodeRepository,
        refresh_tokens: RefreshTokenService,
        jwt_provider: JwtProvider,
        password_hasher: PasswordHasher,
        notifier: AuthNotifier,
        code_ttl: timedelta = timedelta(minutes=30),
        clock: Clock = utcnow,
    ) -> None:
        self._users = users
        self._codes = codes
        self._refresh_tokens = refresh_tokens
        self._jwt = jwt_provider
        self._hasher = password_hasher
        self._notifier = notifier
        self._code_ttl = code_ttl
        self._clock = clock

    # -------------------------
    # Signup / verification
    # -------------------------

    def signup(self, *, email: str, password: str, name: str | None = None) -> UserModel:
        normalized = normalize_email(email)
        if self._users.exists_by_email(normalized):
            raise EmailTakenError()

        user = UserModel(
            id=str(uuid4()),
            email=normalized,
            full_name=name.strip() if name and name.strip() else None,
            password_hash=self._hasher.hash_password(password),
            role=ROLE_USER,
            email_verified_at=None,
            created_at=self._clock(),
        )
        if not self._users.add_if_email_free(user):
            # a concurrent signup took the address after the check above
            logger.warning("signup_email_race_lost")
            raise EmailTakenError()

        code = self._create_code(user, PURPOSE_EMAIL_VERIFICATION)
        self._notify(self._notifier.send_verification_code, user.email, code, kind=PURPOSE_EMAIL_VERIFICATION)

        logger.info("signup_succeeded", user_id=user.id)
        return user

    def verify_email(self, *, email: str, code: str) -> VerificationResult:
        user = self._users.get_by_email(email)
        if user is None:
            raise UserNotFoundError()

        if user.email_verified_at is not None:
            return VerificationResult(already_verified=True, verified_at=user.email_verified_at)

        record = self._consume_code(user, PURPOSE_EMAIL_VERIFICATION, code)

        now = self._clock()
        record.used_at = now
        user.email_verified_at = now
        user.updated_at = now

        logger.info("email_verified", user_id=user.id)
        return VerificationResult(already_verified=False, verified_at=now)

    # -------------------------
    # Login / logout
    # -------------------------

    def login(self, *, email: str, password: str) -> LoginResult:
        user = self._users.get_by_email(email)
        if user is None or not self._hasher.verify_password(password, user.password_hash):
            logger.warning("login_bad_credentials")
            raise BadCredentialsError()

        if user.email_verified_at is None:
            logger.warning("login_email_not_verified", user_id=user.id)
            raise EmailNotVerifiedError()

        user.last_login = self._clock()

        refresh = self._refresh_tokens.issue(owner_id=user.id)
        logger.info("login_succeeded", user_id=user.id, role=user.role)
        return LoginResult(user=user, access_token=self._access_token_for(user), refresh=refresh)

    def logout(self, record: RefreshTokenModel) -> None:
        # only this device; sibling sessions stay valid
        self._refresh_tokens.revoke(record, immediate=True, reason="logout")

    # -------------------------
    # Refresh rotation
    # -------------------------

    def refresh(self, raw_refresh_token: str) -> LoginResult:
        claims = self._jwt.decode_refresh(raw_refresh_token)

        stored = self._refresh_tokens.find_active(raw_refresh_token)
        if stored is None:
            self._handle_potential_reuse(claims.token_id)

        if stored.id != claims.token_id or stored.user_id != claims.subject:
            logger.warning(
                "refresh_token_mismatch",
                stored_id=stored.id,
                expected_id=claims.token_id,
                stored_user=stored.user_id,
                expected_user=claims.subject,
            )
            self._refresh_tokens.revoke(stored, immediate=True, reason="mismatch")
            raise InvalidTokenError("mismatch")

        user = self._users.get_by_id(stored.user_id)
        if user is None:
            self._refresh_tokens.revoke(stored, immediate=True, reason="user_not_found")
            raise InvalidTokenError("user_not_found")

        # conditional revoke: a concurrent refresh with the same token loses here
        if not self._refresh_tokens.revoke(stored, immediate=False, reason="rotated"):
            self._handle_potential_reuse(claims.token_id)

        new_refresh = self._refresh_tokens.issue(owner_id=user.id)
        logger.info(
            "refresh_token_rotated",
            old_token_id=claims.token_id,
            new_token_id=new_refresh.record.id,
            user_id=user.id,
        )
        return LoginResult(user=user, access_token=self._access_token_for(user), refresh=new_refresh)

    def _handle_potential_reuse(self, token_id: str) -> NoReturn:
        known = self._refresh_tokens.find_by_id(token_id)
        if known is None:
            raise InvalidTokenError("unknown_token")

        owner_id = known.user_id
        logger.warning("refresh_token_reuse_detected", token_id=token_id, user_id=owner_id)
        self._refresh_tokens.revoke_all_for(owner_id, reason="reuse_detected")
        raise TokenReplayDetectedError(token_id=token_id, user_id=owner_id)

    # -------------------------
    # Password reset
    # -------------------------

    def request_password_reset(self, *, email: str) -> None:
        # Same outcome whether or not the account exists.
        user = self._users.get_by_email(email)
        if user is None:
            logger.info("password_reset_requested_unknown_email")
            return

        code = self._create_code(user, PURPOSE_PASSWORD_RESET)
        self._notify(self._notifier.send_password_reset_code, user.email, code, kind=PURPOSE_PASSWORD_RESET)
        logger.info("password_reset_requested", user_id=user.id)

    def reset_password(self, *, email: str, code: str, new_password: str) -> None:
        user = self._users.get_by_email(email)
        if user is None:
            raise UserNotFoundError()

        record = self._consume_code(user, PURPOSE_PASSWORD_RESET, code)

        now = self._clock()
        record.used_at = now
        user.password_hash = self._hasher.hash_password(new_password)
        user.updated_at = now

        revoked = self._refresh_tokens.revoke_all_for(user.id, reason="password_reset")
        logger.info("password_reset_completed", user_id=user.id, revoked_sessions=revoked)

    # -------------------------
    # Helpers
    # -------------------------

    def _access_token_for(self, user: UserModel) -> str:
        return self._jwt.issue_access_token(subject=user.id, role=user.role, email=user.email)

    def _create_code(self, user: UserModel, purpose: str) -> str:
        now = self._clock()
        self._codes.delete_expired(user_id=user.id, purpose=purpose, now=now)

        code = f"{secrets.randbelow(1_000_000):06d}"
        self._codes.add(
            OneTimeCodeModel(
                user_id=user.id,
                purpose=purpose,
                code_hash=sha256_hex(code),
                created_at=now,
                expires_at=now + self._code_ttl,
                used_at=None,
            )
        )
        return code

    def _consume_code(self, user: UserModel, purpose: str, code: str) -> OneTimeCodeModel:
        record = self._codes.find_unused(user_id=user.id, purpose=purpose, code_hash=sha256_hex(code.strip()))
        if record is None:
            logger.warning("one_time_code_invalid", user_id=user.id, purpose=purpose)
            raise InvalidCodeError()

        if record.expires_at < self._clock():
            logger.warning("one_time_code_expired", user_id=user.id, purpose=purpose)
            raise CodeExpiredError()

        return record

    def _notify(self, send, email: str, code: str, *, kind: str) -> None:
        try:
            send(email, code)
        except Exception:
            # delivery is best effort; the account change already happened
            logger.exception("auth_notification_failed", kind=kind, user_email=email)
