from datetime import timedelta

import jwt
import pytest

from timeblocks.core.exceptions import InvalidTokenError
from timeblocks.infrastructure.security.jwt_provider import JwtProvider


def _provider(**overrides) -> JwtProvider:
    values = dict(
        access_key=b"a" * 64,
        refresh_key=b"r" * 64,
        access_ttl=timedelta(minutes=15),
        refresh_ttl=timedelta(days=30),
        issuer="timeblocks-test",
        audience="timeblocks-test-web",
    )
    values.update(overrides)
    return JwtProvider(**values)


def _tamper_signature(token: str) -> str:
    header, payload, signature = token.split(".")
    swapped = "A" if signature[10] != "A" else "B"
    return ".".join([header, payload, signature[:10] + swapped + signature[11:]])


@pytest.fixture
def provider():
    return _provider()


def test_access_token_roundtrip(provider):
    token = provider.issue_access_token(subject="user-1", role="USER", email="u@example.com")

    claims = provider.decode_access(token)

    assert claims.subject == "user-1"
    assert claims.role == "USER"
    assert claims.email == "u@example.com"
    assert claims.expires_at - claims.issued_at == timedelta(minutes=15)


def test_refresh_token_carries_token_id(provider):
    token = provider.issue_refresh_token(token_id="abc123", subject="user-1")

    claims = provider.decode_refresh(token)

    assert claims.token_id == "abc123"
    assert claims.subject == "user-1"
    assert claims.expires_at - claims.issued_at == timedelta(days=30)


def test_expired_token_is_rejected(provider):
    token = provider.issue_access_token(subject="user-1", ttl=timedelta(seconds=-30))

    with pytest.raises(InvalidTokenError) as exc:
        provider.decode_access(token)

    assert exc.value.reason == "expired"


def test_clock_skew_leeway_accepts_recently_expired_token():
    provider = _provider(leeway_seconds=60)
    token = provider.issue_access_token(subject="user-1", ttl=timedelta(seconds=-5))

    assert provider.decode_access(token).subject == "user-1"


def test_tampered_signature_is_malformed(provider):
    token = _tamper_signature(provider.issue_refresh_token(token_id="abc123", subject="user-1"))

    with pytest.raises(InvalidTokenError) as exc:
        provider.decode_refresh(token)

    assert exc.value.reason == "malformed"


def test_garbage_is_malformed(provider):
    with pytest.raises(InvalidTokenError) as exc:
        provider.decode_access("not-a-jwt")

    assert exc.value.reason == "malformed"


def test_access_token_never_verifies_as_refresh(provider):
    token = provider.issue_access_token(subject="user-1")

    with pytest.raises(InvalidTokenError):
        provider.decode_refresh(token)


def test_token_type_is_checked_even_with_shared_key():
    provider = _provider(refresh_key=b"a" * 64)
    token = provider.issue_refresh_token(token_id="abc123", subject="user-1")

    with pytest.raises(InvalidTokenError) as exc:
        provider.decode_access(token)

    assert exc.value.reason == "malformed"


def test_other_key_is_rejected(provider):
    token = _provider(access_key=b"x" * 64).issue_access_token(subject="user-1")

    with pytest.raises(InvalidTokenError):
        provider.decode_access(token)


def test_unexpected_parse_failure_is_unknown(provider, monkeypatch):
    token = provider.issue_access_token(subject="user-1")

    def boom(*args, **kwargs):
        raise ValueError("unexpected")

    monkeypatch.setattr(jwt, "decode", boom)

    with pytest.raises(InvalidTokenError) as exc:
        provider.decode_access(token)

    assert exc.value.reason == "unknown"


def test_explicit_zero_ttl_is_honoured(provider):
    access = provider.issue_access_token(subject="user-1", ttl=timedelta(0))
    refresh = provider.issue_refresh_token(token_id="abc123", subject="user-1", ttl=timedelta(0))

    for token in (access, refresh):
        claims = jwt.decode(token, options={"verify_signature": False})
        assert claims["exp"] == claims["iat"]

    with pytest.raises(InvalidTokenError) as exc:
        provider.decode_access(access)
    assert exc.value.reason == "expired"
