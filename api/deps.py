"""
API dependencies.

Provides dependency injection for services and the session credential.
"""

import logging
from typing import Optional, Annotated
from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from nrv.config import load_config, Config
from nrv.services import (
    ServiceContext,
    AuthService,
    ContentService,
    ChatService,
    Caller,
)

logger = logging.getLogger(__name__)

# Security scheme (alternative to the session cookie)
security = HTTPBearer(auto_error=False)


@dataclass
class Services:
    """Container for all services."""
    config: Config
    context: ServiceContext
    auth: AuthService
    content: ContentService
    chat: ChatService

    @classmethod
    def create(cls, context: ServiceContext) -> "Services":
        """Build every service on top of a shared context."""
        return cls(
            config=context.config,
            context=context,
            auth=AuthService(context),
            content=ContentService(context),
            chat=ChatService(context),
        )

    def close(self):
        self.chat.close()
        self.context.close()


# Global services instance (singleton)
_services: Optional[Services] = None


def get_services() -> Services:
    """
    Get or create the services singleton.

    This opens the database and initializes all services on first call.
    """
    global _services

    if _services is None:
        logger.info("Initializing services...")
        context = ServiceContext.create(config=load_config())
        _services = Services.create(context)
        logger.info("Services initialized successfully")

    return _services


def set_services(services: Optional[Services]):
    """Install a prebuilt services container (used by the entry point)."""
    global _services
    _services = services


def close_services():
    """Close and cleanup services."""
    global _services
    if _services:
        _services.close()
        _services = None
        logger.info("Services closed")


# Dependency for getting services
def services_dep() -> Services:
    """FastAPI dependency for services."""
    return get_services()


ServicesDep = Annotated[Services, Depends(services_dep)]


# Session credential

def get_session_token(
    request: Request,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    services: ServicesDep
) -> Optional[str]:
    """
    Get the session token presented with the request.

    A live session cookie wins. A Bearer token is used when there is no
    cookie or the cookie's session no longer resolves. Returns None when
    neither is present.
    """
    cookie = request.cookies.get(services.config.auth.cookie_name)
    bearer = credentials.credentials if credentials is not None else None

    if cookie and (not bearer or services.auth.check_auth(cookie).success):
        return cookie

    return bearer or cookie or None


SessionToken = Annotated[Optional[str], Depends(get_session_token)]


def get_caller(token: SessionToken, services: ServicesDep) -> Caller:
    """Get the caller context for the presented session (anonymous if none)."""
    return services.auth.caller_for(token)


CurrentCaller = Annotated[Caller, Depends(get_caller)]

