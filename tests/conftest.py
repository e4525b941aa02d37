from datetime import datetime

import pytest

from timeblocks.api.components import EXTENSION_KEY as AUTH_EXTENSION_KEY
from timeblocks.config.settings import Settings
from timeblocks.infrastructure.database.models.user_model import ROLE_USER, UserModel
from timeblocks.infrastructure.database.session import EXTENSION_KEY as DB_EXTENSION_KEY
from timeblocks.main import create_app

ACCESS_SECRET = "test-access-secret-for-automation-only"
REFRESH_SECRET = "test-refresh-secret-for-automation-only"


class RecordingNotifier:
    """Keeps the last code sent to each address instead of e-mailing it."""

    def __init__(self):
        self.verification_codes: dict[str, str] = {}
        self.reset_codes: dict[str, str] = {}

    def send_verification_code(self, email: str, code: str) -> None:
        self.verification_codes[email] = code

    def send_password_reset_code(self, email: str, code: str) -> None:
        self.reset_codes[email] = code


def build_settings(**overrides) -> Settings:
    values = dict(
        database_url="sqlite://",
        auth_access_secret=ACCESS_SECRET,
        auth_refresh_secret=REFRESH_SECRET,
        password_hash_iterations=1_000,
        auth_rate_limit_max=100,
        log_json=False,
        log_level="WARNING",
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings():
    return build_settings()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def make_app(notifier):
    def factory(**overrides):
        return create_app(build_settings(**overrides), notifier=notifier)

    return factory


@pytest.fixture
def app(settings, notifier):
    return create_app(settings, notifier=notifier)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def components(app):
    return app.extensions[AUTH_EXTENSION_KEY]


@pytest.fixture
def database(app):
    return app.extensions[DB_EXTENSION_KEY]


@pytest.fixture
def in_session(database, components):
    """Run ``fn(auth_service)`` in its own unit of work, like one request."""

    def run(fn):
        with database.session() as session:
            return fn(components.auth_service(session))

    return run


@pytest.fixture
def make_user(database):
    def factory(user_id: str = "user-1", email: str = "user-1@example.com") -> str:
        with database.session() as session:
            session.add(
                UserModel(
                    id=user_id,
                    email=email,
                    password_hash="unused",
                    role=ROLE_USER,
                    created_at=datetime(2026, 1, 1),
                )
            )
        return user_id

    return factory


@pytest.fixture
def verified_user(in_session, notifier):
    """Signed-up and verified account; returns (email, password, user_id)."""
    email, password = "user@example.com", "Password123!"
    user = in_session(lambda svc: svc.signup(email=email, password=password, name="Test User"))
    in_session(lambda svc: svc.verify_email(email=email, code=notifier.verification_codes[email]))
    return email, password, user.id
