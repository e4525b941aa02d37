from datetime import timedelta

from sqlalchemy import func, select, update

from timeblocks.core.clock import utcnow
from timeblocks.infrastructure.database.models.refresh_token_model import RefreshTokenModel
from timeblocks.infrastructure.database.models.user_model import ROLE_ADMIN, UserModel


def _count_tokens(database) -> int:
    with database.session() as session:
        return session.execute(select(func.count()).select_from(RefreshTokenModel)).scalar_one()


def test_seed_admin_creates_verified_admin(app, database):
    result = app.test_cli_runner().invoke(
        args=["seed-admin", "--email", "Root@Example.com", "--password", "AdminPass123!", "--name", "Root"]
    )

    assert result.exit_code == 0, result.output
    assert "admin created: root@example.com" in result.output

    with database.session() as session:
        user = session.execute(select(UserModel).where(UserModel.email == "root@example.com")).scalar_one()
        assert user.role == ROLE_ADMIN
        assert user.email_verified_at is not None
        assert user.full_name == "Root"


def test_seed_admin_promotes_existing_user(app, database, in_session):
    in_session(lambda svc: svc.signup(email="promote@example.com", password="Password123!"))

    result = app.test_cli_runner().invoke(
        args=["seed-admin", "--email", "promote@example.com", "--password", "AdminPass123!"]
    )

    assert result.exit_code == 0, result.output
    assert "admin updated" in result.output
    login = in_session(lambda svc: svc.login(email="promote@example.com", password="AdminPass123!"))
    assert login.user.role == ROLE_ADMIN


def test_purge_refresh_tokens(app, database, in_session, verified_user):
    email, password, _ = verified_user
    first = in_session(lambda svc: svc.login(email=email, password=password))
    in_session(lambda svc: svc.refresh(first.refresh.raw_token))
    assert _count_tokens(database) == 2

    # nothing is past retention yet
    result = app.test_cli_runner().invoke(args=["purge-refresh-tokens"])
    assert result.exit_code == 0, result.output
    assert "purged 0 refresh token(s)" in result.output

    with database.session() as session:
        session.execute(
            update(RefreshTokenModel)
            .where(RefreshTokenModel.id == first.refresh.record.id)
            .values(revoked_at=utcnow() - timedelta(days=45))
        )

    result = app.test_cli_runner().invoke(args=["purge-refresh-tokens"])
    assert "purged 1 refresh token(s)" in result.output
    assert _count_tokens(database) == 1
