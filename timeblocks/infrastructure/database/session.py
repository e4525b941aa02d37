# timeblocks/infrastructure/database/session.py

from contextlib import contextmanager
from typing import Iterator

from flask import current_app
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from timeblocks.core.exceptions import AppError
from timeblocks.infrastructure.database.base_model import BaseModel

EXTENSION_KEY = "timeblocks.db"


class Database:
    def __init__(self, url: str, *, echo: bool = False) -> None:
        self.engine: Engine = _build_engine(url, echo=echo)
        self._session_factory = sessionmaker(
            bind=self.engine,
            autoflush=False,
            autocommit=False,
            expire_on_commit=False,
        )

    def create_all(self) -> None:
        import timeblocks.infrastructure.database.models  # noqa: F401

        BaseModel.metadata.create_all(self.engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Unit of work.

        Commits on success and also when an AppError escapes: domain errors
        are expected outcomes and the writes leading to them (revoking a
        replayed refresh chain, for instance) must persist. Anything else
        rolls back.
        """
        session: Session = self._session_factory()
        try:
            yield session
            session.commit()
        except AppError:
            session.commit()
            raise
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


def _build_engine(url: str, *, echo: bool) -> Engine:
    if url.startswith("sqlite"):
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # one shared connection, otherwise every session sees an empty database
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **kwargs)

    return create_engine(url, echo=echo, pool_pre_ping=True)


@contextmanager
def db_session() -> Iterator[Session]:
    database: Database = current_app.extensions[EXTENSION_KEY]
    with database.session() as session:
        yield session
