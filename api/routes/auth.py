"""
Authentication endpoints.

Handles invitation-gated signup, signin, logout, session check and
invitation code generation.

Endpoints are plain `def` and run in the thread pool, since bcrypt blocks.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Response, status
from pydantic import BaseModel, ConfigDict, Field

from nrv.services import AuthResult, AuthStatus

from ..deps import ServicesDep, SessionToken, CurrentCaller

logger = logging.getLogger(__name__)

router = APIRouter()

STATUS_CODES = {
    AuthStatus.OK: status.HTTP_200_OK,
    AuthStatus.CREATED: status.HTTP_201_CREATED,
    AuthStatus.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    AuthStatus.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    AuthStatus.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    AuthStatus.CONFLICT: status.HTTP_409_CONFLICT,
    AuthStatus.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# Callers only learn which bucket they fell into
ERROR_DETAILS = {
    AuthStatus.INVALID_INPUT: "Invalid request",
    AuthStatus.UNAUTHORIZED: "Not authorized",
    AuthStatus.FORBIDDEN: "Forbidden",
    AuthStatus.CONFLICT: "Username already exists",
    AuthStatus.INTERNAL: "Internal server error",
}


def raise_for_result(result: AuthResult):
    """Raise the HTTPException matching a failed AuthResult."""
    if result.success:
        return

    headers = None
    if result.status is AuthStatus.UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}

    raise HTTPException(
        status_code=STATUS_CODES[result.status],
        detail=ERROR_DETAILS[result.status],
        headers=headers
    )


# Request/Response models

class SignupRequest(BaseModel):
    """Signup request."""
    model_config = ConfigDict(populate_by_name=True)

    username: str = Field(..., description="Requested username")
    password: str = Field(..., description="Password")
    invitation_code: str = Field(..., alias="invitationCode", description="Single-use invitation code")


class SigninRequest(BaseModel):
    """Signin request."""
    username: str = Field(..., description="Username")
    password: str = Field(..., description="Password")


class SessionResponse(BaseModel):
    """Session info response."""
    model_config = ConfigDict(populate_by_name=True)

    authenticated: bool = True
    username: str
    expires_at: str = Field(..., serialization_alias="expiresAt")


class InviteResponse(BaseModel):
    """Invitation code response."""
    code: str


class MessageResponse(BaseModel):
    """Plain status response."""
    success: bool
    message: Optional[str] = None


# Endpoints

@router.post("/signup", status_code=status.HTTP_201_CREATED, response_model=MessageResponse)
def signup(request: SignupRequest, services: ServicesDep):
    """
    Register a new user.

    Consumes the invitation code. Does not sign the user in.
    """
    result = services.auth.signup(
        username=request.username,
        password=request.password,
        invitation_code=request.invitation_code
    )
    raise_for_result(result)
    return MessageResponse(success=True, message="Account created")


@router.post("/signin", response_model=SessionResponse, response_model_by_alias=True)
def signin(request: SigninRequest, response: Response, services: ServicesDep):
    """
    Sign in with username and password.

    Sets the session cookie, expiring with the session.
    """
    result = services.auth.signin(username=request.username, password=request.password)
    raise_for_result(result)

    session = result.session
    auth_cfg = services.config.auth
    response.set_cookie(
        key=auth_cfg.cookie_name,
        value=session.token,
        expires=session.expires_at_datetime,
        path="/",
        secure=auth_cfg.cookie_secure,
        httponly=True,
        samesite="lax"
    )

    return SessionResponse(
        username=session.username,
        expires_at=session.expires_at_datetime.isoformat()
    )


@router.post("/logout", response_model=MessageResponse)
def logout(token: SessionToken, response: Response, services: ServicesDep):
    """
    Sign out.

    Revokes the session and clears the cookie.
    """
    result = services.auth.signout(token)
    raise_for_result(result)

    auth_cfg = services.config.auth
    response.delete_cookie(
        key=auth_cfg.cookie_name,
        path="/",
        secure=auth_cfg.cookie_secure,
        httponly=True,
        samesite="lax"
    )
    return MessageResponse(success=True)


@router.get("/check-auth", response_model=SessionResponse, response_model_by_alias=True)
def check_auth(token: SessionToken, services: ServicesDep):
    """
    Check the current session.

    Returns 401 if the credential is missing, unknown or expired.
    """
    result = services.auth.check_auth(token)
    raise_for_result(result)

    return SessionResponse(
        username=result.username,
        expires_at=result.session.expires_at_datetime.isoformat()
    )


@router.post("/generate-invite-code", status_code=status.HTTP_201_CREATED, response_model=InviteResponse)
def generate_invite_code(caller: CurrentCaller, services: ServicesDep):
    """
    Generate an invitation code.

    Requires a session belonging to one of the configured operators.
    """
    result = services.auth.generate_invite(caller)
    raise_for_result(result)
    return InviteResponse(code=result.code)
