# timeblocks/services/refresh_token_service.py

from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import uuid4

from timeblocks.core.clock import Clock, utcnow
from timeblocks.core.logging import get_logger
from timeblocks.infrastructure.database.models.refresh_token_model import RefreshTokenModel
from timeblocks.infrastructure.security.hashing import sha256_hex
from timeblocks.infrastructure.security.jwt_provider import JwtProvider
from timeblocks.repositories.refresh_token_repository import RefreshTokenRepository

logger = get_logger(__name__)


@dataclass(frozen=True)
class IssuedRefreshToken:
    raw_token: str  # handed to the client once, never stored
    record: RefreshTokenModel


class RefreshTokenService:
    """Persistence of refresh sessions.

    Only the SHA-256 of the whole signed token is stored. A rotated token is
    revoked but kept (``immediate=False``) so a later replay can still be
    found by id; ``purge_retained`` deletes it after the retention period.
    """

    def __init__(
        self,
        *,
        jwt_provider: JwtProvider,
        repo: RefreshTokenRepository,
        retention: timedelta = timedelta(days=30),
        clock: Clock = utcnow,
    ) -> None:
        self._jwt = jwt_provider
        self._repo = repo
        self._retention = retention
        self._clock = clock

    def issue(self, *, owner_id: str) -> IssuedRefreshToken:
        token_id = uuid4().hex
        raw_token = self._jwt.issue_refresh_token(token_id=token_id, subject=owner_id)

        now = self._clock()
        model = RefreshTokenModel(
            id=token_id,
            user_id=owner_id,
            token_hash=sha256_hex(raw_token),
            issued_at=now,
            expires_at=now + self._jwt.refresh_ttl,
            revoked_at=None,
            reason=None,
        )
        self._repo.add(model)

        logger.info("refresh_token_issued", token_id=token_id, user_id=owner_id)
        return IssuedRefreshToken(raw_token=raw_token, record=model)

    def find_active(self, raw_token: str) -> RefreshTokenModel | None:
        stored = self._repo.get_by_hash(sha256_hex(raw_token))
        if stored is None:
            logger.warning("refresh_token_lookup", result="not_found")
            return None

        if stored.revoked_at is not None:
            logger.warning("refresh_token_lookup", result="revoked", token_id=stored.id, user_id=stored.user_id)
            return None

        if stored.expires_at <= self._clock():
            logger.warning(
                "refresh_token_lookup",
                result="expired",
                token_id=stored.id,
                user_id=stored.user_id,
                expires_at=stored.expires_at.isoformat(),
            )
            return None

        return stored

    def find_by_id(self, token_id: str) -> RefreshTokenModel | None:
        return self._repo.get_by_id(token_id)

    def revoke(self, record: RefreshTokenModel, *, immediate: bool, reason: str | None = None) -> bool:
        """Revoke ``record``; with ``immediate`` also delete it.

        Returns True only if this call moved the record from unrevoked to
        revoked. A deleted record is gone for both hash and id lookups.
        """
        token_id, user_id = record.id, record.user_id

        transitioned = self._repo.mark_revoked(token_id=token_id, revoked_at=self._clock(), reason=reason)
        if immediate:
            self._repo.delete_by_id(token_id)

        logger.info(
            "refresh_token_revoked",
            token_id=token_id,
            user_id=user_id,
            immediate=immediate,
            reason=reason,
            transitioned=transitioned,
        )
        return transitioned

    def revoke_all_for(self, owner_id: str, *, reason: str) -> int:
        tokens = self._repo.list_unrevoked_for_user(owner_id)
        for token in tokens:
            self.revoke(token, immediate=True, reason=reason)

        logger.info("refresh_tokens_revoked_for_user", user_id=owner_id, count=len(tokens), reason=reason)
        return len(tokens)

    def purge_retained(self, now: datetime | None = None) -> int:
        now = now or self._clock()
        removed = self._repo.purge(revoked_before=now - self._retention, expired_before=now)
        logger.info("refresh_tokens_purged", count=removed)
        return removed
