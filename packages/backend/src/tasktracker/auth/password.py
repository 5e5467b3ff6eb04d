"""Password hashing utilities.

Learn: New hashes use Argon2id (argon2-cffi), a memory-hard algorithm.
PasswordHasher generates a fresh random salt per call and encodes the
parameters into the hash string ("$argon2id$v=19$m=...").

Hashes from the earlier bcrypt scheme ("$2b$...") are still verified,
and auto-upgraded to Argon2id on successful login. Argon2 hashes made
with outdated parameters are flagged for upgrade the same way.
"""

import bcrypt
from argon2 import PasswordHasher
from argon2.exceptions import HashingError, InvalidHashError, VerificationError

_hasher = PasswordHasher()


class PasswordHashingError(Exception):
    """Raised when a password cannot be hashed."""


def hash_password(password: str) -> str:
    """Hash a password with Argon2id."""
    try:
        return _hasher.hash(password)
    except HashingError as e:
        raise PasswordHashingError(str(e)) from e


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash.

    Supports both Argon2 ($argon2...) and legacy bcrypt ($2b$...) formats.
    Malformed hashes never verify. Use needs_upgrade() to check if a hash
    should be re-hashed.
    """
    if _is_legacy_hash(password_hash):
        return _verify_legacy(password, password_hash)
    try:
        return _hasher.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def needs_upgrade(password_hash: str) -> bool:
    """Check if a password hash should be re-hashed with current settings."""
    if _is_legacy_hash(password_hash):
        return True
    try:
        return _hasher.check_needs_rehash(password_hash)
    except (InvalidHashError, ValueError):
        return False


def _is_legacy_hash(password_hash: str) -> bool:
    """Detect bcrypt hashes ($2a$, $2b$, $2y$)."""
    return password_hash.startswith("$2")


def _verify_legacy(password: str, password_hash: str) -> bool:
    """Verify a legacy bcrypt hash. bcrypt only looks at the first 72 bytes."""
    try:
        pw_bytes = password.encode("utf-8")[:72]
        return bcrypt.checkpw(pw_bytes, password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False
