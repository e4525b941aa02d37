# timeblocks/repositories/user_repository.py

from sqlalchemy import exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from timeblocks.core.base_repository import BaseRepository
from timeblocks.infrastructure.database.models.user_model import UserModel


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserRepository(BaseRepository[UserModel]):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def get_by_id(self, user_id: str) -> UserModel | None:
        return self._session.get(UserModel, user_id)

    def get_by_email(self, email: str) -> UserModel | None:
        stmt = select(UserModel).where(UserModel.email == normalize_email(email))
        return self._session.execute(stmt).scalar_one_or_none()

    def exists_by_email(self, email: str) -> bool:
        stmt = select(exists().where(UserModel.email == normalize_email(email)))
        return bool(self._session.execute(stmt).scalar())

    def add_if_email_free(self, user: UserModel) -> bool:
        """Insert ``user``; False when the unique e-mail index rejects it.

        Must be the first write of the unit of work: the rollback discards
        the whole transaction.
        """
        try:
            self.add(user)
        except IntegrityError:
            self._session.rollback()
            return False
        return True
