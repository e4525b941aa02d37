# timeblocks/core/interfaces/auth_notifier.py
from __future__ import annotations

from typing import Protocol


class AuthNotifier(Protocol):
    def send_verification_code(self, email: str, code: str) -> None:
        ...

    def send_password_reset_code(self, email: str, code: str) -> None:
        ...
