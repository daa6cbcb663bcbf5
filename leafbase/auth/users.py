"""
User management service.

This module provides functionality for:
- User registration
- User login and token issuing
- Identity lookup for authenticated requests
"""
from datetime import datetime
from typing import Optional

from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from leafbase.auth.errors import (
    DuplicateEmailError,
    DuplicateKeyError,
    DuplicateUsernameError,
    InvalidCredentialsError,
    ValidationError,
)
from leafbase.auth.jwt import Token, TokenIssuer
from leafbase.auth.models import User
from leafbase.auth.password import MAX_PASSWORD_BYTES, PasswordHasher, encode_password
from leafbase.auth.store import CredentialStore


# Pydantic models for request validation
class UserCreate(BaseModel):
    """Model for user registration."""
    username: str = Field(..., min_length=1, max_length=64)
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserLogin(BaseModel):
    """Model for user login."""
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserOut(BaseModel):
    """Model for user information returned to clients."""
    id: int
    username: str
    email: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class Identity(BaseModel):
    """Minimal identity projection returned with a login token."""
    id: int
    username: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class LoginResult(BaseModel):
    token: str
    token_type: str
    expires_at: int
    identity: Identity

    @classmethod
    def build(cls, token: Token, user: User) -> "LoginResult":
        return cls(
            token=token.access_token,
            token_type=token.token_type,
            expires_at=token.expires_at,
            identity=Identity.model_validate(user),
        )


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class UserService:
    """
    Service for registration and login.

    Args:
        store: credential store bound to the current request's session
        hasher: password hasher
        issuer: token issuer
    """
    def __init__(self, store: CredentialStore, hasher: PasswordHasher, issuer: TokenIssuer):
        self.store = store
        self.hasher = hasher
        self.issuer = issuer

    async def register_user(self, username: str, email: str, password: str) -> UserOut:
        """
        Register a new user.

        Raises:
            ValidationError: a field is empty or the password is too long
            DuplicateUsernameError: username already registered
            DuplicateEmailError: email already registered
        """
        username = (username or "").strip()
        email = normalize_email(email)
        if not username:
            raise ValidationError("Username must not be empty")
        if not email:
            raise ValidationError("Email must not be empty")
        if not password:
            raise ValidationError("Password must not be empty")
        if len(encode_password(password)) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

        if await self.store.find_by_username(username) is not None:
            raise DuplicateUsernameError()
        if await self.store.find_by_email(email) is not None:
            raise DuplicateEmailError()

        hashed_password = await run_in_threadpool(self.hasher.hash, password)
        new_user = User(username=username, email=email, hashed_password=hashed_password)
        try:
            new_user = await self.store.insert_if_unique(new_user)
        except DuplicateKeyError as e:
            # Lost a race with a concurrent registration
            if await self.store.find_by_username(username) is not None:
                raise DuplicateUsernameError() from e
            raise DuplicateEmailError() from e

        return UserOut.model_validate(new_user)

    async def authenticate_user(self, email: str, password: str) -> LoginResult:
        """
        Check credentials and issue an access token.

        Unknown email and wrong password raise the same
        ``InvalidCredentialsError``.
        """
        email = normalize_email(email)
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = await self.store.find_by_email(email)
        if user is None:
            await run_in_threadpool(self.hasher.verify_dummy, password)
            raise InvalidCredentialsError()

        valid = await run_in_threadpool(self.hasher.verify, password, user.hashed_password)
        if not valid:
            raise InvalidCredentialsError()

        token = self.issuer.issue(user.id)
        return LoginResult.build(token, user)

    async def get_user_by_id(self, user_id: int) -> Optional[UserOut]:
        user = await self.store.find_by_id(user_id)
        if user is None:
            return None
        return UserOut.model_validate(user)
