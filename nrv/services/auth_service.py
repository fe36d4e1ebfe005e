"""
User authentication service.

Invitation-gated signup, password signin, and session check/signout.

Every operation returns an AuthResult instead of raising. Failures fall
into a handful of statuses so callers can't tell a wrong password from an
unknown user, or a database outage from a hashing failure.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .base import BaseService, ServiceContext
from ..auth import ConsumeResult, InvitationLedger, PasswordHandler, Session, SessionStore, UserStore
from ..errors import HashingError, StorageError, UsernameTakenError

logger = logging.getLogger(__name__)


class AuthStatus(str, Enum):
    """Outcome of an authentication operation."""
    OK = "ok"
    CREATED = "created"
    INVALID_INPUT = "invalid_input"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    INTERNAL = "internal"


@dataclass
class AuthResult:
    """Authentication result."""
    status: AuthStatus
    session: Optional[Session] = None
    username: Optional[str] = None
    code: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status in (AuthStatus.OK, AuthStatus.CREATED)


@dataclass(frozen=True)
class Caller:
    """
    Who is asking for a privileged operation.

    Built explicitly by the caller's entry point (HTTP session or console)
    and handed to operations that need it.
    """
    username: Optional[str] = None
    privileged: bool = False

    @property
    def authenticated(self) -> bool:
        return self.username is not None

    @classmethod
    def anonymous(cls) -> "Caller":
        return cls()

    @classmethod
    def system(cls) -> "Caller":
        """The local operator console."""
        return cls(username="<console>", privileged=True)


class AuthService(BaseService):
    """
    Service for user authentication.

    Handles:
    - Signup with a single-use invitation code
    - Signin with username and password
    - Session check and signout
    - Invitation code generation for privileged callers
    """

    def __init__(
        self,
        context: ServiceContext,
        users: Optional[UserStore] = None,
        invitations: Optional[InvitationLedger] = None,
        sessions: Optional[SessionStore] = None,
        passwords: Optional[PasswordHandler] = None
    ):
        """
        Initialize auth service.

        Args:
            context: Shared service context
            users: Optional user store (created on context.db if not provided)
            invitations: Optional invitation ledger (created on context.db if not provided)
            sessions: Optional session store (created from config if not provided)
            passwords: Optional password handler (created from config if not provided)
        """
        super().__init__(context)
        auth_cfg = self.config.auth
        self.users = users if users is not None else UserStore(self.db)
        self.invitations = invitations if invitations is not None else InvitationLedger(self.db)
        self.sessions = sessions if sessions is not None else SessionStore(ttl_seconds=auth_cfg.session_ttl_seconds)
        self.passwords = passwords if passwords is not None else PasswordHandler(rounds=auth_cfg.bcrypt_rounds)

    def signup(self, username: str, password: str, invitation_code: str) -> AuthResult:
        """
        Register a new user.

        Args:
            username: Requested username
            password: Plain text password
            invitation_code: Unused invitation code

        Returns:
            AuthResult with CREATED on success; no session is issued
        """
        username = (username or "").strip()
        if not username or not invitation_code:
            return AuthResult(status=AuthStatus.INVALID_INPUT)

        try:
            consumed = self.invitations.consume(invitation_code)
        except StorageError as e:
            logger.error(f"Signup failed reading invitation code: {e}")
            return AuthResult(status=AuthStatus.INTERNAL)

        if consumed is not ConsumeResult.CONSUMED:
            logger.info(f"Signup rejected for {username}: invitation {consumed.value}")
            return AuthResult(status=AuthStatus.UNAUTHORIZED)

        try:
            password_hash = self.passwords.hash(password)
            self.users.create_user(username, password_hash)
        except UsernameTakenError:
            logger.info(f"Signup rejected: username {username} already exists")
            self._release_invitation(invitation_code)
            return AuthResult(status=AuthStatus.CONFLICT)
        except (HashingError, StorageError) as e:
            logger.error(f"Signup failed for {username}: {e}")
            self._release_invitation(invitation_code)
            return AuthResult(status=AuthStatus.INTERNAL)

        logger.info(f"User registered: {username}")
        return AuthResult(status=AuthStatus.CREATED, username=username)

    def signin(self, username: str, password: str) -> AuthResult:
        """
        Login with username and password.

        Args:
            username: Username
            password: Password

        Returns:
            AuthResult with a new session if successful
        """
        try:
            user = self.users.get_by_username((username or "").strip())
        except StorageError as e:
            logger.error(f"Signin failed looking up user: {e}")
            return AuthResult(status=AuthStatus.INTERNAL)

        if user is None or not self.passwords.verify(password, user.password_hash):
            logger.info("Signin rejected: invalid username or password")
            return AuthResult(status=AuthStatus.UNAUTHORIZED)

        session = self.sessions.create(user.username)
        logger.info(f"User signed in: {user.username}")
        return AuthResult(status=AuthStatus.OK, session=session, username=user.username)

    def signout(self, token: Optional[str]) -> AuthResult:
        """
        End a session.

        Args:
            token: Session token presented by the caller

        Returns:
            AuthResult OK if a live session was revoked
        """
        if not token:
            return AuthResult(status=AuthStatus.UNAUTHORIZED)

        session = self.sessions.revoke(token)
        if session is None:
            return AuthResult(status=AuthStatus.UNAUTHORIZED)

        logger.info(f"User signed out: {session.username}")
        return AuthResult(status=AuthStatus.OK, username=session.username)

    def check_auth(self, token: Optional[str]) -> AuthResult:
        """
        Check a session token.

        Args:
            token: Session token presented by the caller

        Returns:
            AuthResult OK with the session if it is present and unexpired
        """
        if not token:
            return AuthResult(status=AuthStatus.UNAUTHORIZED)

        session = self.sessions.lookup(token)
        if session is None:
            return AuthResult(status=AuthStatus.UNAUTHORIZED)

        return AuthResult(status=AuthStatus.OK, session=session, username=session.username)

    def caller_for(self, token: Optional[str]) -> Caller:
        """
        Build the caller context for a session token.

        Args:
            token: Session token presented by the caller

        Returns:
            Caller (anonymous when the token is missing, unknown or expired)
        """
        result = self.check_auth(token)
        if not result.success:
            return Caller.anonymous()

        return Caller(
            username=result.username,
            privileged=result.username in self.config.auth.admin_users
        )

    def generate_invite(self, caller: Caller) -> AuthResult:
        """
        Issue a new invitation code.

        Args:
            caller: Explicit caller context; must be privileged

        Returns:
            AuthResult CREATED with the code
        """
        if not caller.authenticated:
            return AuthResult(status=AuthStatus.UNAUTHORIZED)

        if not caller.privileged:
            logger.warning(f"Invitation request denied for {caller.username}")
            return AuthResult(status=AuthStatus.FORBIDDEN)

        try:
            code = self.invitations.issue()
        except StorageError as e:
            logger.error(f"Invitation code generation failed: {e}")
            return AuthResult(status=AuthStatus.INTERNAL)

        logger.info(f"Invitation code generated by {caller.username}")
        return AuthResult(status=AuthStatus.CREATED, code=code)

    def _release_invitation(self, code: str):
        """Give a consumed code back after a failed signup, if configured to."""
        if not self.config.auth.release_invite_on_failure:
            return

        try:
            self.invitations.release(code)
        except StorageError as e:
            logger.error(f"Could not release invitation code: {e}")
