"""
Password handling utilities.

Uses bcrypt for secure password hashing.
"""

import base64
import hashlib
import logging

import bcrypt

from ..errors import HashingError

logger = logging.getLogger(__name__)

# bcrypt work factor (higher = more secure but slower)
# Each step doubles the cost; 14 is roughly a second per hash
BCRYPT_ROUNDS = 14

# bcrypt only reads the first 72 bytes of its input
BCRYPT_MAX_BYTES = 72


def _prepare(password: str) -> bytes:
    """
    Encode a password for bcrypt.

    Inputs longer than bcrypt's limit are reduced to a base64 SHA-256 digest
    so that no password is rejected and every byte still counts.
    """
    raw = password.encode("utf-8")
    if len(raw) > BCRYPT_MAX_BYTES:
        raw = base64.b64encode(hashlib.sha256(raw).digest())
    return raw


class PasswordHandler:
    """
    Handles password hashing and verification using bcrypt.

    Usage:
        handler = PasswordHandler()
        hashed = handler.hash("my_password")
        is_valid = handler.verify("my_password", hashed)
    """

    def __init__(self, rounds: int = BCRYPT_ROUNDS):
        """
        Initialize password handler.

        Args:
            rounds: bcrypt work factor (default: 14)
        """
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password (any string, including empty)

        Returns:
            Hashed password string (includes salt and cost)

        Raises:
            HashingError: If the bcrypt primitive fails
        """
        try:
            salt = bcrypt.gensalt(rounds=self.rounds)
            hashed = bcrypt.hashpw(_prepare(password), salt)
        except (ValueError, TypeError, MemoryError) as e:
            logger.error(f"Password hashing failed: {e}")
            raise HashingError("Password hashing failed") from e

        return hashed.decode("utf-8")

    def verify(self, password: str, hashed: str) -> bool:
        """
        Verify a password against a hash.

        Args:
            password: Plain text password to verify
            hashed: Previously hashed password

        Returns:
            True if password matches, False otherwise (including malformed hashes)
        """
        if not hashed:
            return False

        try:
            return bcrypt.checkpw(_prepare(password), hashed.encode("utf-8"))
        except (ValueError, TypeError) as e:
            logger.warning(f"Password verification error: {e}")
            return False

    def needs_rehash(self, hashed: str) -> bool:
        """
        Check if a hash needs to be rehashed (e.g., rounds changed).

        Args:
            hashed: Previously hashed password

        Returns:
            True if hash should be regenerated
        """
        # bcrypt hash format: $2b$rounds$salt+hash
        parts = hashed.split("$")
        if len(parts) >= 3 and parts[2].isdigit():
            return int(parts[2]) != self.rounds
        return True
