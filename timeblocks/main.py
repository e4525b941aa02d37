# timeblocks/main.py
from __future__ import annotations

from flask import Flask
from flask_cors import CORS

from timeblocks.api.components import EXTENSION_KEY as AUTH_EXTENSION_KEY
from timeblocks.api.components import AuthComponents
from timeblocks.api.middlewares.auth_middleware import register_request_authenticator
from timeblocks.api.middlewares.error_handler import register_error_handlers
from timeblocks.api.routes import register_routes
from timeblocks.cli import register_cli
from timeblocks.config.flask_config import configure_app
from timeblocks.config.settings import Settings
from timeblocks.core.interfaces.auth_notifier import AuthNotifier
from timeblocks.core.logging import configure_logging, get_logger
from timeblocks.infrastructure.database.session import EXTENSION_KEY as DB_EXTENSION_KEY
from timeblocks.infrastructure.database.session import Database

API_PREFIX = "/api"

logger = get_logger(__name__)


def create_app(settings: Settings | None = None, *, notifier: AuthNotifier | None = None) -> Flask:
    settings = settings or Settings()
    configure_logging(settings.log_level, json_output=settings.log_json)

    app = Flask(__name__)

    CORS(
        app,
        resources={rf"{API_PREFIX}/*": {"origins": settings.cors_origins}},
        supports_credentials=True,
        allow_headers=["Content-Type", "Authorization"],
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    )

    configure_app(app, settings)

    database = Database(settings.sqlalchemy_url, echo=settings.debug)
    if settings.auto_create_schema:
        database.create_all()
    app.extensions[DB_EXTENSION_KEY] = database

    # keys are derived here, once per process
    app.extensions[AUTH_EXTENSION_KEY] = AuthComponents.from_settings(settings, notifier=notifier)

    register_request_authenticator(app)
    register_routes(app, api_prefix=API_PREFIX)
    register_error_handlers(app)
    register_cli(app)

    logger.info("app_created", environment=settings.environment)
    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000)
