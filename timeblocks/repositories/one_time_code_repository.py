# timeblocks/repositories/one_time_code_repository.py

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from timeblocks.core.base_repository import BaseRepository
from timeblocks.infrastructure.database.models.one_time_code_model import OneTimeCodeModel


class OneTimeCodeRepository(BaseRepository[OneTimeCodeModel]):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def find_unused(self, *, user_id: str, purpose: str, code_hash: str) -> OneTimeCodeModel | None:
        stmt = (
            select(OneTimeCodeModel)
            .where(
                OneTimeCodeModel.user_id == user_id,
                OneTimeCodeModel.purpose == purpose,
                OneTimeCodeModel.code_hash == code_hash,
                OneTimeCodeModel.used_at.is_(None),
            )
            .order_by(OneTimeCodeModel.id.desc())
            .limit(1)
        )
        return self._session.execute(stmt).scalars().first()

    def delete_expired(self, *, user_id: str, purpose: str, now: datetime) -> int:
        stmt = delete(OneTimeCodeModel).where(
            OneTimeCodeModel.user_id == user_id,
            OneTimeCodeModel.purpose == purpose,
            OneTimeCodeModel.expires_at < now,
        )
        result = self._session.execute(stmt)
        return int(result.rowcount or 0)
