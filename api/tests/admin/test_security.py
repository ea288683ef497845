"""Tests for admin password hashing."""

from src.admin.security import (
    DEFAULT_PASSWORD_HASH,
    hash_password,
    is_legacy_hash,
    legacy_hash_password,
    verify_password,
)


class TestPasswordHashing:
    """Tests for password hashing functions."""

    def test_hash_password_is_argon2id(self) -> None:
        hashed = hash_password("SecureP@ssword123")
        assert hashed.startswith("$argon2id$")

    def test_hash_password_unique_hashes(self) -> None:
        """Same password should produce different hashes (due to salt)."""
        assert hash_password("same") != hash_password("same")

    def test_verify_password_correct(self) -> None:
        hashed = hash_password("SecureP@ssword123")
        is_valid, new_hash = verify_password("SecureP@ssword123", hashed)
        assert is_valid is True
        assert new_hash is None

    def test_verify_password_incorrect(self) -> None:
        hashed = hash_password("SecureP@ssword123")
        is_valid, new_hash = verify_password("WrongP@ssword456", hashed)
        assert is_valid is False
        assert new_hash is None

    def test_garbage_hash_does_not_verify(self) -> None:
        assert verify_password("password", "not-a-hash") == (False, None)


class TestLegacyHashes:
    """SHA-256 hex hashes from older admin configs."""

    def test_default_hash_is_sha256_of_password(self) -> None:
        assert legacy_hash_password("password") == DEFAULT_PASSWORD_HASH
        assert is_legacy_hash(DEFAULT_PASSWORD_HASH) is True

    def test_legacy_hash_verifies_and_requests_upgrade(self) -> None:
        is_valid, new_hash = verify_password("password", DEFAULT_PASSWORD_HASH)
        assert is_valid is True
        assert new_hash is not None
        assert new_hash.startswith("$argon2id$")
        assert verify_password("password", new_hash) == (True, None)

    def test_legacy_hash_mismatch(self) -> None:
        assert verify_password("letmein", DEFAULT_PASSWORD_HASH) == (False, None)

    def test_uppercase_hex_accepted(self) -> None:
        is_valid, _ = verify_password("password", DEFAULT_PASSWORD_HASH.upper())
        assert is_valid is True
