# timeblocks/api/routes/__init__.py

from flask import Flask

from timeblocks.api.routes.admin_routes import bp_admin
from timeblocks.api.routes.auth_routes import bp_auth
from timeblocks.api.routes.health_routes import bp_health


def register_routes(app: Flask, *, api_prefix: str = "/api") -> None:
    # health outside /api
    app.register_blueprint(bp_health, url_prefix="/health")

    app.register_blueprint(bp_auth, url_prefix=f"{api_prefix}/auth")
    app.register_blueprint(bp_admin, url_prefix=f"{api_prefix}/admin")
