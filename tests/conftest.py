"""
Pytest configuration and shared fixtures.

This module provides common fixtures for testing:
- Temporary SQLite database
- Password handler, stores and session store
- Auth service with fast bcrypt
- API client wired to real services
"""

import os
import sys
from pathlib import Path
from typing import Generator
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment variables before imports
os.environ["NRV_STATIC_DIR"] = str(Path(__file__).parent / "no-static-dir")
os.environ["NRV_BCRYPT_ROUNDS"] = "4"

from nrv.auth import InvitationLedger, PasswordHandler, SessionStore, UserStore
from nrv.config import AuthConfig, ChatConfig, Config, DatabaseConfig, ServerConfig
from nrv.database import init_database
from nrv.services import AuthService, ServiceContext


# =============================================================================
# Configuration
# =============================================================================

@pytest.fixture(scope="session")
def test_config():
    """Test configuration values."""
    return {
        "test_username": "neo",
        "test_password": "TestPassword123!",
        "admin_username": "root",
        "admin_password": "AdminPassword123!",
        "invite_code": "AbC123==",
    }


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def app_config(tmp_path, test_config) -> Config:
    """Config pointing at a temporary database."""
    return Config(
        database=DatabaseConfig(url=f"sqlite:///{tmp_path / 'test.db'}"),
        auth=AuthConfig(
            bcrypt_rounds=4,
            session_ttl_seconds=3600,
            cookie_name="session_token",
            cookie_secure=False,
            release_invite_on_failure=True,
            admin_users=[test_config["admin_username"]],
        ),
        chat=ChatConfig(url="http://ollama.test/api/generate", model="chat", timeout_seconds=5),
        server=ServerConfig(proc_root=str(tmp_path / "proc")),
    )


# =============================================================================
# Storage Fixtures
# =============================================================================

@pytest.fixture
def database(app_config):
    """Fresh database with tables and seed content."""
    db = init_database(app_config.database.url)
    yield db
    db.close()


@pytest.fixture
def context(app_config, database) -> ServiceContext:
    return ServiceContext(config=app_config, db=database)


@pytest.fixture
def user_store(database) -> UserStore:
    return UserStore(database)


@pytest.fixture
def invitation_ledger(database) -> InvitationLedger:
    return InvitationLedger(database)


@pytest.fixture
def password_handler() -> PasswordHandler:
    """Create a PasswordHandler with a fast work factor."""
    return PasswordHandler(rounds=4)


@pytest.fixture
def session_store() -> SessionStore:
    """Session store on the real clock (cookies must not look expired)."""
    return SessionStore(ttl_seconds=3600)


@pytest.fixture
def clocked_session_store(clock) -> SessionStore:
    """Session store on a manually advanced clock."""
    return SessionStore(ttl_seconds=3600, clock=clock)


# =============================================================================
# Service Fixtures
# =============================================================================

@pytest.fixture
def auth_service(context, user_store, invitation_ledger, session_store, password_handler) -> AuthService:
    return AuthService(
        context,
        users=user_store,
        invitations=invitation_ledger,
        sessions=session_store,
        passwords=password_handler
    )


@pytest.fixture
def registered_user(auth_service, invitation_ledger, test_config):
    """A user created through a normal signup."""
    code = invitation_ledger.issue()
    result = auth_service.signup(test_config["test_username"], test_config["test_password"], code)
    assert result.success
    return test_config["test_username"]


# =============================================================================
# API Client Fixtures
# =============================================================================

@pytest.fixture
def services(context, auth_service):
    """Real services container on the temporary database."""
    from api.deps import Services
    from nrv.services import ChatService, ContentService

    container = Services(
        config=context.config,
        context=context,
        auth=auth_service,
        content=ContentService(context),
        chat=ChatService(context),
    )
    yield container
    container.chat.close()


@pytest.fixture
def api_app():
    """Create FastAPI app for testing."""
    from api.main import app
    return app


@pytest.fixture
def api_client(api_app, services) -> Generator[TestClient, None, None]:
    """Create synchronous test client for API, backed by the test services."""
    with patch("api.deps.get_services", return_value=services):
        yield TestClient(api_app)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as unit test"
    )
    config.addinivalue_line(
        "markers", "api: mark test as API endpoint test"
    )
