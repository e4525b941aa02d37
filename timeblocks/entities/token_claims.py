# timeblocks/entities/token_claims.py
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class AccessClaims:
    subject: str
    role: Optional[str]
    email: Optional[str]
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class RefreshClaims:
    token_id: str
    subject: str
    issued_at: datetime
    expires_at: datetime
