"""
auth/errors.py -- Exception taxonomy for the authentication core.

Two families:

  AuthError subclasses are what the flows and the gate raise. Each carries a
  stable machine-readable `code` and a client-safe `message`. api/main.py maps
  the code to an HTTP status; nothing in auth/ knows about status codes.

  TokenError subclasses are raised by decode_access_token(). They stay inside
  the auth layer: the gate logs the `reason` and converts every one of them to
  UnauthenticatedError, so a client cannot tell an expired token from a forged
  one.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base class for every failure the auth core reports to a caller."""

    code = "auth_error"
    default_message = "Authentication error."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AuthError):
    """Missing or malformed input. The caller's fault; nothing was written."""

    code = "validation_error"
    default_message = "Invalid request."


class DuplicateUserError(AuthError):
    code = "duplicate_user"
    default_message = "User already exists with this email or username"


class InvalidCredentialsError(AuthError):
    """Login failure.

    The message is deliberately identical for "no such email" and "wrong
    password" so responses cannot be used to enumerate accounts.
    """

    code = "invalid_credentials"
    default_message = "Invalid email or password"


class UnauthenticatedError(AuthError):
    code = "unauthenticated"
    default_message = "Access token required"


class StorageUnavailableError(AuthError):
    code = "storage_unavailable"
    default_message = "Database not connected"


class InternalError(AuthError):
    code = "internal_error"
    default_message = "An unexpected error occurred."


# ---------------------------------------------------------------------------
# Token verification failures
# ---------------------------------------------------------------------------


class TokenError(Exception):
    """A token failed verification. `reason` is for server-side logs only."""

    reason = "invalid"

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(f"{self.reason}: {detail}" if detail else self.reason)


class MalformedTokenError(TokenError):
    reason = "malformed"


class InvalidSignatureError(TokenError):
    reason = "invalid_signature"


class ExpiredTokenError(TokenError):
    reason = "expired"
