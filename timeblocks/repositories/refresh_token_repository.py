# timeblocks/repositories/refresh_token_repository.py

from datetime import datetime

from sqlalchemy import delete, or_, select, update
from sqlalchemy.orm import Session

from timeblocks.core.base_repository import BaseRepository
from timeblocks.infrastructure.database.models.refresh_token_model import RefreshTokenModel


class RefreshTokenRepository(BaseRepository[RefreshTokenModel]):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def get_by_hash(self, token_hash: str) -> RefreshTokenModel | None:
        stmt = select(RefreshTokenModel).where(RefreshTokenModel.token_hash == token_hash)
        return self._session.execute(stmt).scalar_one_or_none()

    def get_by_id(self, token_id: str) -> RefreshTokenModel | None:
        stmt = select(RefreshTokenModel).where(RefreshTokenModel.id == token_id)
        return self._session.execute(stmt).scalar_one_or_none()

    def list_unrevoked_for_user(self, user_id: str) -> list[RefreshTokenModel]:
        stmt = select(RefreshTokenModel).where(
            RefreshTokenModel.user_id == user_id,
            RefreshTokenModel.revoked_at.is_(None),
        )
        return list(self._session.execute(stmt).scalars().all())

    def mark_revoked(self, *, token_id: str, revoked_at: datetime, reason: str | None = None) -> bool:
        """Compare-and-set: only an unrevoked row is touched.

        Returns False when another transaction got there first, which is what
        keeps two concurrent rotations of the same token from both succeeding.
        """
        stmt = (
            update(RefreshTokenModel)
            .where(RefreshTokenModel.id == token_id, RefreshTokenModel.revoked_at.is_(None))
            .values(revoked_at=revoked_at, reason=reason)
        )
        result = self._session.execute(stmt)
        return (result.rowcount or 0) > 0

    def delete_by_id(self, token_id: str) -> None:
        stmt = delete(RefreshTokenModel).where(RefreshTokenModel.id == token_id)
        self._session.execute(stmt)

    def purge(self, *, revoked_before: datetime, expired_before: datetime) -> int:
        stmt = delete(RefreshTokenModel).where(
            or_(
                RefreshTokenModel.revoked_at < revoked_before,
                RefreshTokenModel.expires_at < expired_before,
            )
        )
        result = self._session.execute(stmt)
        return int(result.rowcount or 0)
