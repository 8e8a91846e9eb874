"""
auth/tokens.py -- Session token issue and verification.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
       sub (the record id as a string), username, email, iat and exp. Nothing
       is stored server-side; a token is valid exactly while its signature
       matches and the current time is before exp.

  Failure modes are distinguishable for logging (MalformedTokenError,
       InvalidSignatureError, ExpiredTokenError) but the access gate turns
       all of them into the same 401.

  Expiry is checked here rather than by jose so the boundary is `now >= exp`
       and tests can pass an explicit clock.

  SECRET_KEY: sourced from core.config.get_settings() at module load. The
       Settings class refuses to build without a key outside DEBUG mode, so
       importing this module in a misconfigured process fails startup.

Layer rule: no imports from api/. Import from core/ is allowed.
"""

from __future__ import annotations

import time

from jose import JWTError, jwt
from jose.exceptions import JWTClaimsError
from jose.utils import base64url_decode, base64url_encode

from auth.errors import ExpiredTokenError, InvalidSignatureError, MalformedTokenError
from auth.models import Identity
from core.config import get_settings

# ---------------------------------------------------------------------------
# Config -- read once at module load via the lru_cache singleton
# ---------------------------------------------------------------------------

_settings = get_settings()

_ALGORITHM = "HS256"

# exp is compared by hand in decode_access_token(); jose only checks the
# signature and the shape of the registered claims.
_DECODE_OPTIONS = {"verify_exp": False}


def _signature_is_canonical(token: str) -> bool:
    """True if the signature segment is the unpadded encoding of its own bytes.

    The last character of a 43-character HS256 signature carries four unused
    bits, and a lenient base64 decoder maps several strings to the same bytes.
    """
    segment = token.rsplit(".", 1)[-1].encode("utf-8")
    return base64url_encode(base64url_decode(segment)) == segment


def create_access_token(
    user_id: int,
    username: str,
    email: str,
    expire_seconds: int = 0,
    issued_at: float | None = None,
) -> str:
    """Encode a signed JWT for one identity.

    Args:
        user_id:        Record id assigned by the store. Stored as the sub claim.
        username:       Username claim.
        email:          Email claim.
        expire_seconds: Lifetime in seconds. If 0 (default), uses
                        Settings.token_expire_seconds (24 hours).
        issued_at:      Epoch seconds to stamp as iat. Defaults to now.
    """
    duration = expire_seconds if expire_seconds > 0 else _settings.token_expire_seconds
    iat = int(issued_at if issued_at is not None else time.time())
    payload = {
        "sub": str(user_id),
        "username": username,
        "email": email,
        "iat": iat,
        "exp": iat + duration,
    }
    return jwt.encode(payload, _settings.secret_key, algorithm=_ALGORITHM)


def decode_access_token(token: str, now: float | None = None) -> Identity:
    """Verify a JWT and return its claims as an Identity.

    Raises:
        MalformedTokenError:   the token does not parse as a JWT, or its
                               claims are missing or of the wrong type.
        InvalidSignatureError: the signature does not match SECRET_KEY.
        ExpiredTokenError:     now >= exp.
    """
    # Structural check first: a string that is not header.payload.signature
    # with a decodable header never reaches signature verification.
    try:
        jwt.get_unverified_header(token)
    except JWTError as exc:
        raise MalformedTokenError(str(exc)) from exc

    try:
        canonical = _signature_is_canonical(token)
    except (ValueError, TypeError) as exc:
        raise MalformedTokenError(f"bad signature encoding: {exc}") from exc
    if not canonical:
        raise InvalidSignatureError("non-canonical signature encoding")

    try:
        payload = jwt.decode(token, _settings.secret_key, algorithms=[_ALGORITHM], options=_DECODE_OPTIONS)
    except JWTClaimsError as exc:
        raise MalformedTokenError(str(exc)) from exc
    except JWTError as exc:
        raise InvalidSignatureError(str(exc)) from exc

    try:
        identity = Identity(
            user_id=int(payload["sub"]),
            username=str(payload["username"]),
            email=str(payload["email"]),
            issued_at=int(payload["iat"]),
            expires_at=int(payload["exp"]),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise MalformedTokenError(f"bad claims: {exc}") from exc

    current = now if now is not None else time.time()
    if current >= identity.expires_at:
        raise ExpiredTokenError(f"expired at {identity.expires_at}")
    return identity
