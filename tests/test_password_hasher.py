import pytest

from timeblocks.infrastructure.security.password_hasher import PasswordHasher


@pytest.fixture
def hasher():
    return PasswordHasher(iterations=1_000)


def test_hash_verifies(hasher):
    encoded = hasher.hash_password("Password123!")

    assert encoded.startswith("pbkdf2_sha256$1000$")
    assert hasher.verify_password("Password123!", encoded)
    assert not hasher.verify_password("Password124!", encoded)


def test_same_password_is_salted(hasher):
    assert hasher.hash_password("Password123!") != hasher.hash_password("Password123!")


def test_short_password_rejected(hasher):
    with pytest.raises(ValueError):
        hasher.hash_password("short")


@pytest.mark.parametrize("encoded", ["", "garbage", "md5$1$abc$def", "pbkdf2_sha256$x$abc$def"])
def test_unreadable_hash_never_verifies(hasher, encoded):
    assert hasher.verify_password("Password123!", encoded) is False
