# timeblocks/infrastructure/database/models/refresh_token_model.py

from datetime import datetime

from sqlalchemy import CHAR, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from timeblocks.infrastructure.database.base_model import BaseModel


class RefreshTokenModel(BaseModel):
    __tablename__ = "tbRefreshTokens"

    # Same value as the "jti" claim of the signed refresh token.
    id: Mapped[str] = mapped_column(String(32), primary_key=True)

    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("tbUsers.id"), nullable=False, index=True)

    token_hash: Mapped[str] = mapped_column(CHAR(64), nullable=False, unique=True)

    issued_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    revoked_at: Mapped[datetime] = mapped_column(DateTime, nullable=True)
    reason: Mapped[str] = mapped_column(String(100), nullable=True)
