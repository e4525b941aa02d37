import base64
import hashlib

from timeblocks.infrastructure.security.key_material import MIN_KEY_BYTES, derive_signing_key


def test_short_plain_text_secret_is_stretched_to_64_bytes():
    key = derive_signing_key("s3cr3t!pwd")

    assert len(key) == MIN_KEY_BYTES == 64
    assert derive_signing_key("s3cr3t!pwd") == key


def test_short_base64_secret_is_decoded_then_stretched():
    raw = b"0123456789"
    secret = base64.b64encode(raw).decode()

    key = derive_signing_key(secret)

    assert len(key) == 64
    assert key == hashlib.sha512(raw).digest()


def test_urlsafe_base64_without_padding_is_accepted():
    raw = bytes(range(250, 256)) * 20  # contains bytes that encode to '-' and '_'
    secret = base64.urlsafe_b64encode(raw).decode().rstrip("=")

    assert derive_signing_key(secret) == raw


def test_long_secret_is_used_unmodified():
    raw = bytes(range(80))
    secret = base64.urlsafe_b64encode(raw).decode()

    assert derive_signing_key(secret) == raw


def test_long_plain_text_is_used_as_utf8_bytes():
    secret = "not base64 at all! " * 5

    assert derive_signing_key(secret) == secret.strip().encode("utf-8")


def test_plain_text_that_parses_as_base64_is_used_decoded():
    secret = "abcd" * 30

    assert derive_signing_key(secret) == base64.b64decode(secret)


def test_blank_secret_yields_random_key_per_call():
    first = derive_signing_key("")
    second = derive_signing_key(None)

    assert len(first) == len(second) == 64
    assert first != second


def test_larger_minimum_chains_sha512_blocks():
    key = derive_signing_key("short", min_length=128)

    assert len(key) == 128
    assert key[:64] == hashlib.sha512(b"short").digest()
