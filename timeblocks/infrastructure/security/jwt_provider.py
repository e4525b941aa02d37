# timeblocks/infrastructure/security/jwt_provider.py

from datetime import datetime, timedelta, timezone

import jwt

from timeblocks.config.settings import Settings
from timeblocks.core.exceptions import InvalidTokenError
from timeblocks.entities.token_claims import AccessClaims, RefreshClaims
from timeblocks.infrastructure.security.key_material import derive_signing_key

ACCESS = "access"
REFRESH = "refresh"


class JwtProvider:
    """Signs and verifies access and refresh JWTs (HS512).

    Access and refresh tokens use independent keys, so a token of one kind
    never verifies as the other. Keys are derived once, at construction.
    """

    def __init__(
        self,
        *,
        access_key: bytes,
        refresh_key: bytes,
        access_ttl: timedelta,
        refresh_ttl: timedelta,
        issuer: str,
        audience: str,
        leeway_seconds: int = 0,
    ) -> None:
        self._access_key = access_key
        self._refresh_key = refresh_key
        self._access_ttl = access_ttl
        self._refresh_ttl = refresh_ttl
        self._issuer = issuer
        self._audience = audience
        self._leeway = leeway_seconds
        self._algorithm = "HS512"

    @classmethod
    def from_settings(cls, settings: Settings) -> "JwtProvider":
        return cls(
            access_key=derive_signing_key(settings.auth_access_secret, name="access"),
            refresh_key=derive_signing_key(settings.auth_refresh_secret, name="refresh"),
            access_ttl=timedelta(minutes=settings.auth_access_ttl_minutes),
            refresh_ttl=timedelta(days=settings.auth_refresh_ttl_days),
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            leeway_seconds=settings.auth_clock_skew_seconds,
        )

    @property
    def refresh_ttl(self) -> timedelta:
        return self._refresh_ttl

    def _issue(self, *, key: bytes, claims: dict, ttl: timedelta, token_type: str) -> str:
        now = datetime.now(tz=timezone.utc)
        payload = {
            "iss": self._issuer,
            "aud": self._audience,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
            "typ": token_type,
        }
        payload.update(claims)
        return jwt.encode(payload, key, algorithm=self._algorithm)

    def issue_access_token(
        self,
        *,
        subject: str,
        role: str | None = None,
        email: str | None = None,
        ttl: timedelta | None = None,
    ) -> str:
        claims: dict = {"sub": str(subject)}
        if role is not None:
            claims["role"] = role
        if email is not None:
            claims["email"] = email
        if ttl is None:
            ttl = self._access_ttl
        return self._issue(key=self._access_key, claims=claims, ttl=ttl, token_type=ACCESS)

    def issue_refresh_token(self, *, token_id: str, subject: str, ttl: timedelta | None = None) -> str:
        # refresh token stays minimal: id + owner
        claims = {"jti": str(token_id), "sub": str(subject)}
        if ttl is None:
            ttl = self._refresh_ttl
        return self._issue(key=self._refresh_key, claims=claims, ttl=ttl, token_type=REFRESH)

    def _decode(self, token: str, *, key: bytes, token_type: str, required: list[str]) -> dict:
        try:
            claims = jwt.decode(
                token,
                key,
                algorithms=[self._algorithm],
                audience=self._audience,
                issuer=self._issuer,
                leeway=self._leeway,
                options={"require": required},
            )
        except jwt.ExpiredSignatureError as e:
            raise InvalidTokenError("expired") from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError("malformed") from e
        except Exception as e:
            raise InvalidTokenError("unknown") from e

        if claims.get("typ") != token_type:
            raise InvalidTokenError("malformed")
        return claims

    def decode_access(self, token: str) -> AccessClaims:
        claims = self._decode(token, key=self._access_key, token_type=ACCESS, required=["exp", "iat", "sub"])
        return AccessClaims(
            subject=str(claims["sub"]),
            role=claims.get("role"),
            email=claims.get("email"),
            issued_at=_from_ts(claims["iat"]),
            expires_at=_from_ts(claims["exp"]),
        )

    def decode_refresh(self, token: str) -> RefreshClaims:
        claims = self._decode(token, key=self._refresh_key, token_type=REFRESH, required=["exp", "iat", "sub", "jti"])
        return RefreshClaims(
            token_id=str(claims["jti"]),
            subject=str(claims["sub"]),
            issued_at=_from_ts(claims["iat"]),
            expires_at=_from_ts(claims["exp"]),
        )


def _from_ts(value) -> datetime:
    return datetime.fromtimestamp(int(value), tz=timezone.utc).replace(tzinfo=None)
