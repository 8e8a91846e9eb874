"""
auth/service.py -- Registration and login flows.

Both flows are plain functions over a UserStore so they can be exercised
without HTTP. They raise AuthError subclasses; api/routes/v1/auth.py turns
those into responses.

Security:
  login_user() always runs one bcrypt verification, against DUMMY_HASH when
  the email is unknown, so the two failure paths take the same time. Both
  paths raise InvalidCredentialsError with the same message. Do NOT inline
  get_by_email() + verify_password() in a route -- that reintroduces the
  enumeration leak.

Layer rule: no imports from api/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from jose import JWTError
from sqlalchemy.exc import IntegrityError

from auth.errors import DuplicateUserError, InternalError, InvalidCredentialsError, ValidationError
from auth.models import User
from auth.passwords import DUMMY_HASH, MAX_PASSWORD_BYTES, hash_password, verify_password
from auth.store import UserStore
from auth.tokens import create_access_token
from core.config import get_settings

logger = logging.getLogger("recordgate.auth")

# Shape check only: local@domain, no whitespace.
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+$")


@dataclass
class AuthResult:
    """A freshly issued token and the record it was issued for."""

    token: str
    user: User


def _blank(*values: str | None) -> bool:
    return any(v is None or not str(v).strip() for v in values)


def _issue_token(user: User) -> str:
    try:
        return create_access_token(user.id, user.username, user.email)
    except JWTError as exc:
        logger.error("Token signing failed for user_id=%s: %s", user.id, exc)
        raise InternalError() from exc


def register_user(
    store: UserStore,
    username: str | None,
    email: str | None,
    password: str | None,
    full_name: str | None,
) -> AuthResult:
    """Create a credential record and issue a token for it.

    Raises:
        ValidationError:         a field is missing, the email is not
                                 address-shaped, or the password length is
                                 out of bounds.
        DuplicateUserError:      the email or username is already taken.
        StorageUnavailableError: the store is down (raised by the store).
        InternalError:           hashing or signing failed.
    """
    # Passwords are never stripped; only an empty one counts as missing.
    if _blank(username, email, full_name) or not password:
        raise ValidationError("All fields are required")
    username = username.strip()
    email = email.strip()
    full_name = full_name.strip()
    if not _EMAIL_RE.match(email):
        raise ValidationError("Email address is not valid")
    min_length = get_settings().password_min_length
    if len(password) < min_length:
        raise ValidationError(f"Password must be at least {min_length} characters long")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes long")

    if store.find_by_email_or_username(email, username) is not None:
        raise DuplicateUserError()

    try:
        hashed = hash_password(password)
    except ValueError as exc:
        logger.error("Password hashing failed: %s", exc)
        raise InternalError() from exc

    user = User(username=username, email=email, full_name=full_name, hashed_password=hashed)
    try:
        store.create_user(user)
    except IntegrityError as exc:
        # A concurrent registration won the race between lookup and insert.
        raise DuplicateUserError() from exc

    logger.info("User registered: %s (id=%s)", user.email, user.id)
    return AuthResult(token=_issue_token(user), user=user)


def login_user(store: UserStore, email: str | None, password: str | None) -> AuthResult:
    """Verify an email/password pair and issue a token.

    Raises:
        ValidationError:         email or password missing.
        InvalidCredentialsError: unknown email or wrong password (same message).
        StorageUnavailableError: the store is down (raised by the store).
        InternalError:           signing failed.
    """
    if _blank(email) or not password:
        raise ValidationError("Email and password are required")
    email = email.strip()

    user = store.get_by_email(email)
    if user is None or user.hashed_password is None:
        # Equalize timing -- do NOT return early before running bcrypt
        verify_password(password, DUMMY_HASH)
        logger.info("Login failed: unknown email")
        raise InvalidCredentialsError()
    if not verify_password(password, user.hashed_password):
        logger.info("Login failed: bad password for user_id=%s", user.id)
        raise InvalidCredentialsError()

    logger.info("User logged in: %s (id=%s)", user.email, user.id)
    return AuthResult(token=_issue_token(user), user=user)
