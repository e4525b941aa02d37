import time

from flask import Blueprint, jsonify
from sqlalchemy import text

from timeblocks.api.components import get_components
from timeblocks.infrastructure.database.session import db_session

bp_health = Blueprint("health", __name__)

SERVICE_NAME = "timeblocks-backend"


@bp_health.get("")
def health():
    return jsonify(
        {
            "ok": True,
            "service": SERVICE_NAME,
            "environment": get_components().settings.environment,
        }
    ), 200


@bp_health.get("/db")
def health_db():
    started = time.perf_counter()
    with db_session() as session:
        session.execute(text("select 1"))
        dialect = session.get_bind().dialect.name
    elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

    return jsonify({"ok": True, "dialect": dialect, "latencyMs": elapsed_ms}), 200
