# timeblocks/cli.py
from __future__ import annotations

from uuid import uuid4

import click
from flask import Flask

from timeblocks.api.components import get_components
from timeblocks.core.clock import utcnow
from timeblocks.infrastructure.database.models.user_model import ROLE_ADMIN, UserModel
from timeblocks.infrastructure.database.session import db_session
from timeblocks.repositories.user_repository import UserRepository, normalize_email


def register_cli(app: Flask) -> None:
    @app.cli.command("purge-refresh-tokens")
    def purge_refresh_tokens() -> None:
        """Delete rotated refresh tokens past retention and expired ones."""
        with db_session() as session:
            removed = get_components().refresh_token_service(session).purge_retained()
        click.echo(f"purged {removed} refresh token(s)")

    @app.cli.command("seed-admin")
    @click.option("--email", required=True)
    @click.option("--password", required=True)
    @click.option("--name", default=None)
    def seed_admin(email: str, password: str, name: str | None) -> None:
        """Create a verified admin, or promote and re-password an existing user."""
        hasher = get_components().password_hasher
        now = utcnow()

        with db_session() as session:
            users = UserRepository(session)
            user = users.get_by_email(email)
            if user is None:
                user = users.add(
                    UserModel(
                        id=str(uuid4()),
                        email=normalize_email(email),
                        full_name=name,
                        password_hash=hasher.hash_password(password),
                        role=ROLE_ADMIN,
                        email_verified_at=now,
                        created_at=now,
                    )
                )
                action = "created"
            else:
                user.role = ROLE_ADMIN
                user.password_hash = hasher.hash_password(password)
                user.email_verified_at = user.email_verified_at or now
                user.updated_at = now
                action = "updated"

        click.echo(f"admin {action}: {user.email} ({user.id})")
