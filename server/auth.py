"""Password gate for protected files, views and groups."""

from typing import Iterable, Optional

from common.passwords import hashes_match
from server.exceptions import InvalidPasswordError, PasswordRequiredError


def check_password_gate(stored_hash: Optional[str], provided_hash: Optional[str], label: str) -> None:
    """
    Verify a caller-supplied password hash against a stored one.

    Args:
        stored_hash: Hash kept with the record (None means unprotected)
        provided_hash: Hash sent by the caller (None or empty means absent)
        label: Human-readable name of the protected item, used in messages

    Raises:
        PasswordRequiredError: If the item is protected and no hash was supplied
        InvalidPasswordError: If the supplied hash does not match
    """
    if not stored_hash:
        return
    if not provided_hash:
        raise PasswordRequiredError(f"Password required for {label}")
    if not hashes_match(stored_hash, provided_hash):
        raise InvalidPasswordError(f"Invalid password for {label}")


def check_password_gates(items: Iterable, provided_hash: Optional[str]) -> None:
    """
    Apply the gate to several ``(stored_hash, label)`` pairs.

    A missing password is reported before a wrong one, so a caller without a
    hash always learns that one is needed rather than which item rejected it.
    """
    items = list(items)
    protected = [(stored, label) for stored, label in items if stored]
    if not protected:
        return
    if not provided_hash:
        raise PasswordRequiredError("One or more files are password protected")
    for stored, label in protected:
        check_password_gate(stored, provided_hash, label)
