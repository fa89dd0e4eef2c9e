"""Password hash helpers shared by the client and the catalog password gate."""

import hashlib
import hmac
from typing import Optional


def hash_password(password: str) -> str:
    """
    Hash a clear-text password the way share links carry it.

    Args:
        password: Plain text password

    Returns:
        Lowercase hex SHA-256 digest of the UTF-8 encoded password
    """
    return hashlib.sha256(password.encode('utf-8')).hexdigest()


def hashes_match(expected_hash: str, provided_hash: Optional[str]) -> bool:
    """
    Compare two password hashes in constant time.

    Args:
        expected_hash: Hash stored with the record
        provided_hash: Hash supplied by the caller (may be None)

    Returns:
        True if both are present and equal (case-insensitive hex)
    """
    if not provided_hash:
        return False
    return hmac.compare_digest(expected_hash.strip().lower(), provided_hash.strip().lower())
