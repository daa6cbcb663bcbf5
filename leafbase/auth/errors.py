"""
Authentication error taxonomy.

Caller-facing errors carry the HTTP status the request boundary maps them
to. Internal errors (encoding, malformed stored hash) are logged and
reported to the caller with a generic message only.
"""
from typing import Dict, Optional


class AuthError(Exception):
    """Base class for all authentication errors."""
    status_code = 500
    public_message = "Internal server error"
    headers: Optional[Dict[str, str]] = None

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.public_message
        super().__init__(self.message)

    @property
    def exposed(self) -> bool:
        """Whether ``message`` may be returned to the caller verbatim."""
        return self.status_code < 500


class ValidationError(AuthError):
    """Bad input shape (empty or oversized fields)."""
    status_code = 400
    public_message = "Invalid input"


class ConflictError(AuthError):
    """Username or email already registered."""
    status_code = 400
    public_message = "Account already exists"


class DuplicateUsernameError(ConflictError):
    public_message = "Username already registered"


class DuplicateEmailError(ConflictError):
    public_message = "Email already registered"


class InvalidCredentialsError(AuthError):
    """Login failed. Raised for unknown email and wrong password alike."""
    status_code = 400
    public_message = "Invalid email or password"


class UnauthenticatedError(AuthError):
    """Missing, invalid or expired bearer token."""
    status_code = 401
    public_message = "Could not validate credentials"
    headers = {"WWW-Authenticate": "Bearer"}


class EncodingError(AuthError):
    """Password could not be encoded as UTF-8."""


class MalformedHashError(AuthError):
    """Stored password hash is not in the expected format."""


# --- Token verification ---

class TokenError(Exception):
    """Base class for token verification failures."""


class InvalidSignatureError(TokenError):
    pass


class TokenExpiredError(TokenError):
    pass


class MalformedTokenError(TokenError):
    pass


# --- Persistence ---

class DuplicateKeyError(Exception):
    """Insert rejected by a unique constraint."""
