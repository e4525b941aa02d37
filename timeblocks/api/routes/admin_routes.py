# timeblocks/api/routes/admin_routes.py
from flask import Blueprint, jsonify

from timeblocks.api.components import get_components
from timeblocks.api.middlewares.auth_middleware import current_user, require_auth, require_roles
from timeblocks.core.exceptions import NotFoundError
from timeblocks.core.logging import get_logger
from timeblocks.infrastructure.database.models.user_model import ROLE_ADMIN
from timeblocks.infrastructure.database.session import db_session
from timeblocks.repositories.user_repository import UserRepository

bp_admin = Blueprint("admin", __name__)

logger = get_logger(__name__)


@bp_admin.post("/users/<user_id>/revoke-sessions")
@require_auth
@require_roles(ROLE_ADMIN)
def revoke_user_sessions(user_id: str):
    """Force every device of ``user_id`` to log in again."""
    with db_session() as session:
        if UserRepository(session).get_by_id(user_id) is None:
            raise NotFoundError("User not found.")
        revoked = get_components().refresh_token_service(session).revoke_all_for(user_id, reason="admin_revoke")

    logger.info("admin_revoked_sessions", admin_id=current_user().id, user_id=user_id, count=revoked)
    return jsonify({"revoked": revoked}), 200
