# timeblocks/infrastructure/database/models/one_time_code_model.py

from datetime import datetime

from sqlalchemy import CHAR, BigInteger, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from timeblocks.infrastructure.database.base_model import BaseModel

PURPOSE_EMAIL_VERIFICATION = "email_verification"
PURPOSE_PASSWORD_RESET = "password_reset"


class OneTimeCodeModel(BaseModel):
    __tablename__ = "tbOneTimeCodes"

    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)

    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("tbUsers.id"), nullable=False, index=True)
    purpose: Mapped[str] = mapped_column(String(30), nullable=False)

    # sha256 hex of the code sent to the user
    code_hash: Mapped[str] = mapped_column(CHAR(64), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    used_at: Mapped[datetime] = mapped_column(DateTime, nullable=True)
