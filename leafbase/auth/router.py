"""
Authentication router.

Endpoints under ``/api/users``:
- Registration and login
- Current user profile
- Liveness ping
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from leafbase.auth.errors import InvalidCredentialsError, UnauthenticatedError
from leafbase.auth.jwt import TokenData
from leafbase.auth.middleware import base_service, get_current_user, get_user_service
from leafbase.auth.users import UserCreate, UserLogin, UserService

router = APIRouter(tags=["auth"])


@router.post("/register")
async def register_user(
    user_data: UserCreate,
    users: UserService = Depends(get_user_service),
):
    """
    Register a new user.

    Returns the created user without any password material.
    """
    user_info = await users.register_user(
        username=user_data.username,
        email=user_data.email,
        password=user_data.password,
    )
    base_service.log_event("user.registered", {
        "id": user_info.id,
        "username": user_info.username,
    })
    return base_service.response(
        message="User registered successfully",
        data=user_info.model_dump(mode="json"),
    )


@router.post("/login")
async def login(
    login_data: UserLogin,
    users: UserService = Depends(get_user_service),
):
    """
    Authenticate a user and return an access token.
    """
    try:
        result = await users.authenticate_user(login_data.email, login_data.password)
    except InvalidCredentialsError:
        base_service.log_event("user.login.failed", {"reason": "invalid_credentials"})
        raise

    base_service.log_event("user.login", {"id": result.identity.id})
    return base_service.response(
        message="Login successful",
        data=result.model_dump(mode="json"),
    )


@router.get("/me")
async def get_current_user_info(
    token_data: TokenData = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    """
    Get information about the current authenticated user.
    """
    user_info = await users.get_user_by_id(token_data.user_id)
    if user_info is None:
        # Token is valid but the account is gone
        raise UnauthenticatedError()
    return base_service.response(
        message="User information retrieved successfully",
        data=user_info.model_dump(mode="json"),
    )


@router.get("/ping")
async def ping():
    """Health check endpoint for the auth service."""
    return base_service.response(
        message="Auth service is alive",
        data={"timestamp": datetime.now(timezone.utc).isoformat()},
    )
