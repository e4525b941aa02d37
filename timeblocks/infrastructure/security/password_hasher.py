import base64
import binascii
import hashlib
import hmac
import os


class PasswordHasher:
    """PBKDF2-SHA256 hashes encoded as ``pbkdf2_sha256$<iterations>$<salt>$<hash>``."""

    ALGO = "pbkdf2_sha256"
    DEFAULT_ITERATIONS = 600_000
    SALT_BYTES = 16

    def __init__(self, iterations: int | None = None) -> None:
        self._iterations = iterations or self.DEFAULT_ITERATIONS

    def hash_password(self, password: str) -> str:
        if not password or len(password) < 8:
            raise ValueError("Password must have at least 8 characters.")

        salt = os.urandom(self.SALT_BYTES)
        dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, self._iterations)

        return "$".join(
            [
                self.ALGO,
                str(self._iterations),
                base64.b64encode(salt).decode("ascii"),
                base64.b64encode(dk).decode("ascii"),
            ]
        )

    def verify_password(self, password: str, encoded: str) -> bool:
        try:
            algo, iterations, salt_b64, hash_b64 = encoded.split("$")
            salt = base64.b64decode(salt_b64.encode("ascii"))
            expected = base64.b64decode(hash_b64.encode("ascii"))
            rounds = int(iterations)
        except (ValueError, binascii.Error):
            return False

        if algo != self.ALGO:
            return False

        dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, rounds)
        return hmac.compare_digest(dk, expected)
