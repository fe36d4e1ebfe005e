"""
Unit tests for User Store.

Tests user creation, lookup and the username uniqueness constraint.
"""

from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from nrv.auth import User, UserStore
from nrv.errors import StorageError, UsernameTakenError


class TestUserStore:
    """Tests for UserStore class."""

    @pytest.mark.unit
    def test_create_user(self, user_store):
        """Test creating a new user."""
        user = user_store.create_user("trinity", "$2b$04$hash")

        assert user == User(username="trinity", password_hash="$2b$04$hash")

    @pytest.mark.unit
    def test_get_by_username(self, user_store):
        """Test retrieving user by username."""
        user_store.create_user("trinity", "$2b$04$hash")

        user = user_store.get_by_username("trinity")

        assert user is not None
        assert user.username == "trinity"
        assert user.password_hash == "$2b$04$hash"

    @pytest.mark.unit
    def test_get_unknown_user(self, user_store):
        """Unknown usernames return None."""
        assert user_store.get_by_username("nobody") is None
        assert user_store.user_exists("nobody") is False

    @pytest.mark.unit
    def test_create_duplicate_user_fails(self, user_store):
        """Duplicate usernames are rejected by the database constraint."""
        user_store.create_user("trinity", "$2b$04$first")

        with pytest.raises(UsernameTakenError) as exc_info:
            user_store.create_user("trinity", "$2b$04$second")

        assert exc_info.value.username == "trinity"
        # Original record untouched
        assert user_store.get_by_username("trinity").password_hash == "$2b$04$first"

    @pytest.mark.unit
    def test_other_constraint_failure_is_not_username_taken(self, user_store):
        """A NOT NULL violation on a fresh name is a plain storage failure."""
        with pytest.raises(StorageError) as exc_info:
            user_store.create_user("trinity", None)

        assert not isinstance(exc_info.value, UsernameTakenError)
        assert user_store.user_exists("trinity") is False

    @pytest.mark.unit
    def test_username_taken_is_a_storage_error(self):
        """Callers that don't care can treat a taken name as a storage failure."""
        assert issubclass(UsernameTakenError, StorageError)

    @pytest.mark.unit
    def test_database_failure_raises_storage_error(self, user_store):
        """Driver errors are wrapped as StorageError."""
        with patch.object(
            Session,
            "scalar",
            side_effect=OperationalError("SELECT", {}, Exception("disk I/O error"))
        ):
            with pytest.raises(StorageError):
                user_store.get_by_username("trinity")

    @pytest.mark.unit
    def test_repr_hides_hash(self):
        """The password hash never shows up in reprs or logs."""
        user = User(username="trinity", password_hash="$2b$04$secret")
        assert "secret" not in repr(user)

    @pytest.mark.unit
    def test_separate_store_sees_same_data(self, database):
        """Stores are thin views over the database."""
        UserStore(database).create_user("trinity", "$2b$04$hash")
        assert UserStore(database).user_exists("trinity") is True
