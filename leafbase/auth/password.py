"""
Password hashing and verification.

Uses bcrypt with a per-call random salt and a configurable work factor.
"""
import re
from typing import Union

import bcrypt

from leafbase.auth.errors import EncodingError, MalformedHashError

# bcrypt ignores input past this many bytes
MAX_PASSWORD_BYTES = 72

_BCRYPT_HASH = re.compile(r"^\$2[abxy]\$(\d{2})\$[./A-Za-z0-9]{53}\Z")


def encode_password(password: str) -> bytes:
    """Encode a plaintext password as UTF-8, raising ``EncodingError`` on failure."""
    if not isinstance(password, str):
        raise EncodingError(f"Password must be text, got {type(password).__name__}")
    try:
        return password.encode("utf-8")
    except UnicodeEncodeError as e:
        raise EncodingError(f"Password is not valid UTF-8: {e.reason}") from e


class PasswordHasher:
    """
    One-way password hasher.

    Args:
        rounds: bcrypt work factor (log2 of the iteration count)
    """
    def __init__(self, rounds: int = 12):
        self.rounds = rounds
        # Throwaway hash for verify_dummy
        self._dummy_hash = self.hash("leafbase-unknown-account")

    def hash(self, password: str) -> str:
        """Hash a password with a fresh salt."""
        raw = encode_password(password)
        return bcrypt.hashpw(raw, bcrypt.gensalt(rounds=self.rounds)).decode("ascii")

    def verify(self, password: str, hashed: Union[str, bytes]) -> bool:
        """
        Check a plaintext password against a stored hash.

        Returns False on mismatch. Raises ``MalformedHashError`` if the
        stored hash is not a bcrypt hash.
        """
        if isinstance(hashed, bytes):
            try:
                hashed = hashed.decode("ascii")
            except UnicodeDecodeError as e:
                raise MalformedHashError("Stored hash is not ASCII") from e
        if not isinstance(hashed, str) or not _BCRYPT_HASH.match(hashed):
            raise MalformedHashError("Stored hash is not a bcrypt hash")

        raw = encode_password(password)
        if len(raw) > MAX_PASSWORD_BYTES:
            # Never accepted at registration, so it cannot match
            return False
        try:
            return bcrypt.checkpw(raw, hashed.encode("ascii"))
        except ValueError as e:
            raise MalformedHashError(str(e)) from e

    def verify_dummy(self, password: str) -> bool:
        """
        Spend the same work as ``verify`` against a throwaway hash.

        Used when no stored hash exists so response time does not reveal
        whether an account is registered. Always returns False.
        """
        self.verify(password, self._dummy_hash)
        return False
