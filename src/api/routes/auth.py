"""Authentication routes.

This module handles the HTTP endpoints for registration, sign-in, token
refresh and the password lifecycle, and defines the guards every other router
uses to authenticate and authorize requests.
"""

import logging
from typing import Annotated, Callable, Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config import API_PREFIX
from core.dependencies import AuthManagerDep, TokenManagerDep
from core.exceptions import TokenInvalidError, UnauthenticatedError
from core.permissions import ADMIN_ONLY, TEACHER_ROLES, check_access
from core.rate_limit import auth_rate_limit
from schemas.common import MessageResponse
from schemas.user import (
    AuthResponse,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    ResetPasswordRequest,
    Role,
    TokenIdentity,
    TokenPair,
    UpdateProfileRequest,
    User,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{API_PREFIX}/auth", tags=["Auth"])

# HTTP Bearer token security; a missing header is reported by the guard
security = HTTPBearer(auto_error=False)


def get_current_identity(
    token_manager: TokenManagerDep,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> TokenIdentity:
    """Resolve the caller's identity from the Authorization header.

    Args:
        token_manager: Injected TokenManager instance.
        credentials: HTTP Bearer token credentials, if any.

    Returns:
        Identity carried by the access token.

    Raises:
        UnauthenticatedError: If no bearer token is present.
        TokenInvalidError: If the token does not verify.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError("Access token required")
    try:
        return token_manager.verify_access(credentials.credentials)
    except TokenInvalidError:
        logger.info("Rejected invalid access token")
        raise


def require_roles(*roles: Role) -> Callable[..., TokenIdentity]:
    """Build a dependency admitting only ``roles`` (ADMIN is always admitted)."""

    def dependency(
        identity: TokenIdentity = Depends(get_current_identity),
    ) -> TokenIdentity:
        return check_access(identity, roles)

    return dependency


require_admin = require_roles(*ADMIN_ONLY)
require_teacher = require_roles(*TEACHER_ROLES)

CurrentIdentity = Annotated[TokenIdentity, Depends(get_current_identity)]
AdminIdentity = Annotated[TokenIdentity, Depends(require_admin)]
TeacherIdentity = Annotated[TokenIdentity, Depends(require_teacher)]


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
@auth_rate_limit
def register(request: Request, req: RegisterRequest, auth_manager: AuthManagerDep) -> AuthResponse:
    """Register a new user of any role and sign them in.

    Args:
        request: Incoming request, used for rate limiting.
        req: Registration request.
        auth_manager: Injected AuthManager instance.

    Returns:
        AuthResponse with the new user and a token pair.
    """
    return auth_manager.register(
        email=req.email,
        password=req.password,
        first_name=req.first_name,
        last_name=req.last_name,
        role=req.role,
    )


@router.post("/login", response_model=AuthResponse, summary="Sign in")
@auth_rate_limit
def login(request: Request, req: LoginRequest, auth_manager: AuthManagerDep) -> AuthResponse:
    """Login with email and password.

    Args:
        req: Login request with email and password.
        auth_manager: Injected AuthManager instance.

    Returns:
        AuthResponse with user information and a token pair.
    """
    return auth_manager.login(req.email, req.password)


@router.post("/refresh", response_model=TokenPair, summary="Refresh tokens")
@auth_rate_limit
def refresh(request: Request, req: RefreshRequest, auth_manager: AuthManagerDep) -> TokenPair:
    """Exchange a refresh token for a new token pair."""
    return auth_manager.refresh(req.refresh_token)


@router.post("/forgot-password", response_model=MessageResponse, summary="Request a password reset")
@auth_rate_limit
def forgot_password(
    request: Request, req: ForgotPasswordRequest, auth_manager: AuthManagerDep
) -> MessageResponse:
    """Send a password reset link.

    The response is the same whether or not the email is registered.
    """
    auth_manager.forgot_password(req.email)
    return MessageResponse(
        message="If the email exists, a password reset link has been sent"
    )


@router.post("/reset-password", response_model=MessageResponse, summary="Reset password")
@auth_rate_limit
def reset_password(
    request: Request, req: ResetPasswordRequest, auth_manager: AuthManagerDep
) -> MessageResponse:
    auth_manager.reset_password(req.token, req.new_password)
    return MessageResponse(message="Password reset successfully")


@router.post("/logout", response_model=MessageResponse, summary="Sign out")
@auth_rate_limit
def logout(
    request: Request, identity: CurrentIdentity, auth_manager: AuthManagerDep
) -> MessageResponse:
    """Logout endpoint.

    Note: Since we're using stateless JWT tokens, logout is handled
    client-side by removing the tokens. This endpoint exists for API
    consistency.
    """
    auth_manager.logout()
    return MessageResponse(message="Logged out successfully")


@router.post("/change-password", response_model=MessageResponse, summary="Change password")
@auth_rate_limit
def change_password(
    request: Request,
    req: ChangePasswordRequest,
    identity: CurrentIdentity,
    auth_manager: AuthManagerDep,
) -> MessageResponse:
    auth_manager.change_password(identity.user_id, req.current_password, req.new_password)
    return MessageResponse(message="Password changed successfully")


@router.get("/me", response_model=User, summary="Get current user")
@auth_rate_limit
def get_me(request: Request, identity: CurrentIdentity, auth_manager: AuthManagerDep) -> User:
    return auth_manager.get_profile(identity.user_id)


@router.patch("/me", response_model=User, summary="Update current user")
@auth_rate_limit
def update_me(
    request: Request,
    req: UpdateProfileRequest,
    identity: CurrentIdentity,
    auth_manager: AuthManagerDep,
) -> User:
    return auth_manager.update_profile(
        identity.user_id, first_name=req.first_name, last_name=req.last_name
    )
