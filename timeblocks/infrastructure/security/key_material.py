# timeblocks/infrastructure/security/key_material.py

import base64
import binascii
import hashlib
import secrets

from timeblocks.core.logging import get_logger

logger = get_logger(__name__)

# HS512 wants a key at least as long as its 64-byte digest
MIN_KEY_BYTES = 64


def derive_signing_key(secret: str | None, *, min_length: int = MIN_KEY_BYTES, name: str = "signing") -> bytes:
    """Turn a configured secret into an HMAC key of at least ``min_length`` bytes.

    The secret is tried as URL-safe base64, then standard base64, then taken
    as raw UTF-8; the first decode that succeeds wins. Plain text that happens
    to be valid base64 is therefore used decoded. Short keys are stretched
    with SHA-512 to exactly ``min_length`` bytes, long keys are used as-is.

    A blank secret yields a random key. Such keys differ per process, so
    tokens minted by one instance are rejected by every other one.
    """
    if secret is None or not secret.strip():
        logger.warning("signing_secret_missing_using_random_key", key_name=name, min_length=min_length)
        return secrets.token_bytes(min_length)

    seed = _decode_secret(secret.strip())
    if len(seed) >= min_length:
        return seed
    return _stretch(seed, min_length)


def _decode_secret(secret: str) -> bytes:
    padded = secret + "=" * (-len(secret) % 4)
    for altchars in (b"-_", None):
        try:
            decoded = base64.b64decode(padded, altchars=altchars, validate=True)
        except (binascii.Error, ValueError):
            continue
        if decoded:
            return decoded
    return secret.encode("utf-8")


def _stretch(seed: bytes, length: int) -> bytes:
    block = hashlib.sha512(seed).digest()
    out = block
    while len(out) < length:
        block = hashlib.sha512(block + seed).digest()
        out += block
    return out[:length]
