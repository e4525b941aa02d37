# timeblocks/entities/user.py
from dataclasses import dataclass


@dataclass(frozen=True)
class AuthenticatedUser:
    """Identity attached to ``flask.g`` for the rest of a request."""

    id: str
    email: str
    role: str
