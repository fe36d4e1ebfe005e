"""
Invitation code ledger.

Signup is gated by single-use codes stored in `invitation_codes`. Consuming
a code is one conditional UPDATE, so two requests racing on the same code
cannot both succeed.
"""

import base64
import logging
import secrets
from enum import Enum
from typing import Optional

from sqlalchemy import select, update

from ..database import Database, InvitationCode

logger = logging.getLogger(__name__)

# 16 random bytes -> 24 URL-safe base64 characters (128 bits)
CODE_BYTES = 16


class ConsumeResult(str, Enum):
    """Outcome of consuming an invitation code."""
    CONSUMED = "consumed"
    NOT_FOUND = "not_found"
    ALREADY_USED = "already_used"


def generate_code(num_bytes: int = CODE_BYTES) -> str:
    """Generate a random URL-safe invitation code."""
    return base64.urlsafe_b64encode(secrets.token_bytes(num_bytes)).decode("ascii")


class InvitationLedger:
    """
    Issues and consumes invitation codes.

    All methods raise StorageError when the database fails.
    """

    def __init__(self, db: Database):
        self.db = db

    def issue(self, code: Optional[str] = None) -> str:
        """
        Create a new unused invitation code.

        Args:
            code: Explicit code to store (default: a fresh random code)

        Returns:
            The stored code
        """
        code = code or generate_code()
        with self.db.session() as session:
            session.add(InvitationCode(code=code, used=False))

        logger.info("Issued invitation code")
        return code

    def consume(self, code: str) -> ConsumeResult:
        """
        Mark a code as used if, and only if, it is currently unused.

        Args:
            code: Invitation code presented by the caller

        Returns:
            ConsumeResult.CONSUMED for the single winning caller
        """
        with self.db.session() as session:
            result = session.execute(
                update(InvitationCode)
                .where(InvitationCode.code == code, InvitationCode.used.is_(False))
                .values(used=True)
            )
            if result.rowcount == 1:
                return ConsumeResult.CONSUMED

            exists = session.scalar(select(InvitationCode.id).where(InvitationCode.code == code))

        if exists is None:
            return ConsumeResult.NOT_FOUND
        return ConsumeResult.ALREADY_USED

    def release(self, code: str) -> bool:
        """
        Return a consumed code to the unused state.

        Args:
            code: Previously consumed code

        Returns:
            True if the code was flipped back
        """
        with self.db.session() as session:
            result = session.execute(
                update(InvitationCode)
                .where(InvitationCode.code == code, InvitationCode.used.is_(True))
                .values(used=False)
            )
            released = result.rowcount == 1

        if released:
            logger.info("Released invitation code after failed signup")
        return released

    def get(self, code: str) -> Optional[InvitationCode]:
        """Get the stored row for a code, or None."""
        with self.db.session() as session:
            return session.scalar(select(InvitationCode).where(InvitationCode.code == code))
