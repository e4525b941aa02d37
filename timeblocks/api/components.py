# timeblocks/api/components.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from flask import current_app
from sqlalchemy.orm import Session

from timeblocks.config.settings import Settings
from timeblocks.core.interfaces.auth_notifier import AuthNotifier
from timeblocks.infrastructure.notifications.log_auth_notifier import LogAuthNotifier
from timeblocks.infrastructure.security.jwt_provider import JwtProvider
from timeblocks.infrastructure.security.password_hasher import PasswordHasher
from timeblocks.infrastructure.security.rate_limiter import RateLimiter
from timeblocks.repositories.one_time_code_repository import OneTimeCodeRepository
from timeblocks.repositories.refresh_token_repository import RefreshTokenRepository
from timeblocks.repositories.user_repository import UserRepository
from timeblocks.services.auth_service import AuthService
from timeblocks.services.refresh_token_service import RefreshTokenService

EXTENSION_KEY = "timeblocks.auth"


@dataclass
class AuthComponents:
    """Process-wide auth collaborators, built once in ``create_app``."""

    settings: Settings
    jwt_provider: JwtProvider
    rate_limiter: RateLimiter
    password_hasher: PasswordHasher
    notifier: AuthNotifier

    @classmethod
    def from_settings(cls, settings: Settings, *, notifier: AuthNotifier | None = None) -> "AuthComponents":
        return cls(
            settings=settings,
            jwt_provider=JwtProvider.from_settings(settings),
            rate_limiter=RateLimiter(settings.auth_rate_limit_window_ms, settings.auth_rate_limit_max),
            password_hasher=PasswordHasher(settings.password_hash_iterations),
            notifier=notifier or LogAuthNotifier(log_codes=settings.auth_notifications_log_codes),
        )

    def refresh_token_service(self, session: Session) -> RefreshTokenService:
        return RefreshTokenService(
            jwt_provider=self.jwt_provider,
            repo=RefreshTokenRepository(session),
            retention=timedelta(days=self.settings.auth_refresh_retention_days),
        )

    def auth_service(self, session: Session) -> AuthService:
        return AuthService(
            users=UserRepository(session),
            codes=OneTimeCodeRepository(session),
            refresh_tokens=self.refresh_token_service(session),
            jwt_provider=self.jwt_provider,
            password_hasher=self.password_hasher,
            notifier=self.notifier,
            code_ttl=timedelta(minutes=self.settings.auth_code_ttl_minutes),
        )


def get_components() -> AuthComponents:
    return current_app.extensions[EXTENSION_KEY]
