"""Password hashing for the admin credential.

Provides:
- Password hashing with Argon2id (OWASP recommended)
- Verification of legacy unsalted SHA-256 hex hashes, which are upgraded
  to Argon2id on the next successful login
"""

import hashlib
import re
import secrets

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError


# Argon2id configuration (OWASP recommended parameters)
# https://cheatsheetseries.owasp.org/cheatsheets/Password_Storage_Cheat_Sheet.html
_password_hasher = PasswordHasher(
    time_cost=2,  # 2 iterations
    memory_cost=19456,  # 19 MiB (19456 KiB)
    parallelism=1,  # Single thread
    hash_len=32,  # 32-byte output
    salt_len=16,  # 16-byte random salt
)

# SHA-256 of "password"; used when no credential has been configured
DEFAULT_PASSWORD_HASH = "5e884898da28047151d0e56f8dc6292773603d0d6aabbdd62a11ef721d1542d8"

_LEGACY_HASH_PATTERN = re.compile(r"^[0-9a-f]{64}$")


def hash_password(password: str) -> str:
    """Hash a password using Argon2id.

    The returned hash includes the algorithm parameters and salt,
    making it self-contained for verification.

    Example:
        >>> hash_password("my-secure-password").startswith("$argon2id$")
        True
    """
    return _password_hasher.hash(password)


def legacy_hash_password(password: str) -> str:
    """Unsalted SHA-256 hex digest, the format of older admin configs."""
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def is_legacy_hash(password_hash: str) -> bool:
    return bool(_LEGACY_HASH_PATTERN.fullmatch(password_hash.lower()))


def verify_password(password: str, password_hash: str) -> tuple[bool, str | None]:
    """Verify a password against its hash.

    Also reports when the hash should be replaced: legacy SHA-256 hashes and
    Argon2 hashes with outdated parameters.

    Args:
        password: Plain text password to verify
        password_hash: Stored Argon2id or legacy SHA-256 hex hash

    Returns:
        Tuple of (is_valid, new_hash):
        - is_valid: True if password matches
        - new_hash: New Argon2id hash if rehash needed, None otherwise

    Example:
        >>> is_valid, new_hash = verify_password("password", DEFAULT_PASSWORD_HASH)
        >>> is_valid, new_hash.startswith("$argon2id$")
        (True, True)
    """
    if is_legacy_hash(password_hash):
        matches = secrets.compare_digest(legacy_hash_password(password), password_hash.lower())
        return (True, hash_password(password)) if matches else (False, None)

    try:
        _password_hasher.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False, None

    if _password_hasher.check_needs_rehash(password_hash):
        return True, hash_password(password)
    return True, None
