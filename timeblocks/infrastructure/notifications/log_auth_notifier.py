# timeblocks/infrastructure/notifications/log_auth_notifier.py
from __future__ import annotations

from timeblocks.core.interfaces.auth_notifier import AuthNotifier
from timeblocks.core.logging import get_logger

logger = get_logger(__name__)


class LogAuthNotifier(AuthNotifier):
    """Stand-in for an e-mail provider: writes codes to the log in dev."""

    def __init__(self, *, log_codes: bool = True) -> None:
        self._log_codes = log_codes

    def send_verification_code(self, email: str, code: str) -> None:
        if self._log_codes:
            logger.info("email_verification_code", recipient=email, code=code)
        else:
            logger.info("email_verification_code_issued", recipient=email)

    def send_password_reset_code(self, email: str, code: str) -> None:
        if self._log_codes:
            logger.info("password_reset_code", recipient=email, code=code)
        else:
            logger.info("password_reset_code_issued", recipient=email)
