"""
Authentication middleware.

This module provides FastAPI dependencies for:
- Building the request's ``UserService``
- Validating the bearer token on protected routes
"""
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from leafbase.auth.errors import TokenError, UnauthenticatedError
from leafbase.auth.jwt import TokenData, TokenIssuer
from leafbase.auth.store import CredentialStore
from leafbase.auth.users import UserService
from leafbase.base_service import BaseService
from leafbase.database import get_db_session

# auto_error is off so a missing header yields our 401, not FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)

base_service = BaseService("auth")


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer


def get_user_service(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> UserService:
    """Dependency wiring the request's session to the shared hasher and issuer."""
    return UserService(
        store=CredentialStore(db),
        hasher=request.app.state.password_hasher,
        issuer=request.app.state.token_issuer,
    )


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> TokenData:
    """
    Authenticate the request from its bearer token.

    Every failure (missing header, bad signature, expired, malformed)
    raises the same ``UnauthenticatedError``. On success the user id is
    stored on ``request.state.user_id`` for downstream handlers.
    """
    if credentials is None or not credentials.credentials:
        base_service.log_event("auth.rejected", {"path": request.url.path, "reason": "missing"})
        raise UnauthenticatedError()

    try:
        token_data = issuer.verify(credentials.credentials)
    except TokenError as e:
        base_service.log_event("auth.rejected", {
            "path": request.url.path,
            "reason": e.__class__.__name__,
        })
        raise UnauthenticatedError() from e

    request.state.user_id = token_data.user_id
    return token_data
