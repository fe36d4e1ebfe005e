"""
Authentication module for the nrv site.

Invitation-gated accounts with bcrypt passwords and opaque in-memory
session tokens.
"""

from .invitations import ConsumeResult, InvitationLedger, generate_code
from .password import PasswordHandler
from .sessions import Session, SessionStore
from .users import User, UserStore

__all__ = [
    "ConsumeResult",
    "InvitationLedger",
    "generate_code",
    "PasswordHandler",
    "Session",
    "SessionStore",
    "User",
    "UserStore",
]
