"""
JWT token handling for authentication.

This module provides functionality for:
- Issuing signed, time-limited access tokens
- Verifying token signature and expiry

Tokens are stateless: verification needs only the signing key, never a
database lookup. A verifier built with a different key rejects every
token issued before the rotation.
"""
import time
from datetime import timedelta
from typing import Callable, Optional, Union

import jwt
from jwt.exceptions import (
    DecodeError,
    ExpiredSignatureError,
    InvalidSignatureError as JWTInvalidSignatureError,
    InvalidTokenError,
)
from pydantic import BaseModel

from leafbase.auth.errors import InvalidSignatureError, MalformedTokenError, TokenExpiredError

REQUIRED_CLAIMS = ["sub", "iat", "exp"]


class Token(BaseModel):
    """Token response model."""
    access_token: str
    token_type: str = "bearer"
    expires_at: int  # Unix timestamp


class TokenData(BaseModel):
    """Verified token payload."""
    user_id: int
    issued_at: int
    expires_at: int


class TokenIssuer:
    """
    Issues and verifies bearer tokens.

    Args:
        secret_key: HMAC signing key
        algorithm: JWT signing algorithm
        default_ttl: lifetime used when ``issue`` gets no explicit ttl
        clock: returns the current Unix time; only used when issuing
    """
    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        default_ttl: timedelta = timedelta(hours=1),
        clock: Callable[[], float] = time.time,
    ):
        self._secret_key = secret_key
        self.algorithm = algorithm
        self.default_ttl = default_ttl
        self._clock = clock

    def issue(self, user_id: Union[int, str], ttl: Optional[timedelta] = None) -> Token:
        """Create a signed token for ``user_id`` valid for ``ttl``."""
        if ttl is None:
            ttl = self.default_ttl
        issued_at = int(self._clock())
        expires_at = issued_at + int(ttl.total_seconds())
        payload = {
            "sub": str(user_id),
            "iat": issued_at,
            "exp": expires_at,
        }
        encoded = jwt.encode(payload, self._secret_key, algorithm=self.algorithm)
        return Token(access_token=encoded, expires_at=expires_at)

    def verify(self, token: str) -> TokenData:
        """
        Verify a token and return its data.

        Raises:
            InvalidSignatureError: signature does not match the signing key
            TokenExpiredError: the token's expiry has passed
            MalformedTokenError: the token cannot be parsed or lacks claims
        """
        if not token or not isinstance(token, str):
            raise MalformedTokenError("Empty token")
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.algorithm],
                options={"require": REQUIRED_CLAIMS},
            )
        except ExpiredSignatureError as e:
            raise TokenExpiredError(str(e)) from e
        # InvalidSignatureError subclasses DecodeError, so it goes first
        except JWTInvalidSignatureError as e:
            raise InvalidSignatureError(str(e)) from e
        except DecodeError as e:
            raise MalformedTokenError(str(e)) from e
        except InvalidTokenError as e:
            raise MalformedTokenError(str(e)) from e

        try:
            user_id = int(payload["sub"])
        except (TypeError, ValueError) as e:
            raise MalformedTokenError("Subject is not a user id") from e
        try:
            # NumericDate may be fractional
            issued_at = int(payload["iat"])
            expires_at = int(payload["exp"])
        except (TypeError, ValueError) as e:
            raise MalformedTokenError("Timestamps are not numeric") from e

        return TokenData(
            user_id=user_id,
            issued_at=issued_at,
            expires_at=expires_at,
        )
