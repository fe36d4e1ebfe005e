"""
User storage.

Identities live in the `users` table. The unique constraint on username is
what serialises two concurrent signups for the same name.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from ..database import Database, User as UserRow
from ..errors import StorageError, UsernameTakenError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class User:
    """User data model."""
    username: str
    password_hash: str

    def __repr__(self) -> str:
        return f"User(username={self.username!r})"


class UserStore:
    """
    Database-backed user storage.

    Users are indexed by username (primary identifier).
    All methods raise StorageError when the database fails.
    """

    def __init__(self, db: Database):
        """
        Initialize user store.

        Args:
            db: Database holding the users table
        """
        self.db = db

    def create_user(self, username: str, password_hash: str) -> User:
        """
        Create a new user.

        Args:
            username: Unique username
            password_hash: Digest produced by PasswordHandler

        Returns:
            Created User object

        Raises:
            UsernameTakenError: If the username already exists
            StorageError: On any other database failure
        """
        with self.db.session() as session:
            session.add(UserRow(username=username, password_hash=password_hash))
            try:
                session.flush()
            except IntegrityError as e:
                session.rollback()
                # Only a clash on the unique username means the name is taken
                if session.scalar(select(UserRow.id).where(UserRow.username == username)) is not None:
                    raise UsernameTakenError(username) from e
                logger.error(f"Could not create user {username}: {e.orig}")
                raise StorageError("User insert violated a constraint") from e

        logger.info(f"Created user: {username}")
        return User(username=username, password_hash=password_hash)

    def get_by_username(self, username: str) -> Optional[User]:
        """
        Get user by username.

        Args:
            username: Username to look up

        Returns:
            User if found, None otherwise
        """
        with self.db.session() as session:
            row = session.scalar(select(UserRow).where(UserRow.username == username))
            if row is None:
                return None
            return User(username=row.username, password_hash=row.password_hash)

    def user_exists(self, username: str) -> bool:
        """Check if a user exists."""
        return self.get_by_username(username) is not None
