"""
auth/dependencies.py -- FastAPI Depends() helpers for the access gate.

get_current_identity() is the gate applied to every protected route:
  1. Read Authorization: Bearer <token>. Missing -> 401.
  2. decode_access_token(). Malformed, bad signature, or expired -> 401.
     The specific reason goes to the log, never to the client.
  3. Attach the Identity to request.state.identity and return it.

The gate is in-memory only. It does not look the user up in the store, so a
protected route still answers 401 (not 503) for a bad token while the
database is down, and a good token never waits on storage here.

get_user_store() is the storage pre-flight: it hands the route the store
only if the last liveness probe succeeded, otherwise 503 before any work.

Layer rule: auth/dependencies.py may import from fastapi because this module
is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

import logging

from fastapi import Request

from auth.errors import TokenError, UnauthenticatedError
from auth.models import Identity
from auth.store import UserStore
from auth.tokens import decode_access_token

logger = logging.getLogger("recordgate.auth")


def _bearer_token(request: Request) -> str | None:
    scheme, _, credentials = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer":
        return None
    return credentials.strip() or None


def get_current_identity(request: Request) -> Identity:
    """Require a valid bearer token. Raises UnauthenticatedError otherwise.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(identity: Identity = Depends(get_current_identity)): ...
    """
    token = _bearer_token(request)
    if token is None:
        raise UnauthenticatedError()
    try:
        identity = decode_access_token(token)
    except TokenError as exc:
        logger.info("Rejected token on %s %s: %s", request.method, request.url.path, exc.reason)
        raise UnauthenticatedError("Invalid or expired token") from exc
    request.state.identity = identity
    return identity


def get_user_store(request: Request) -> UserStore:
    """Return the app's UserStore, or raise StorageUnavailableError if it is down."""
    store: UserStore = request.app.state.user_store
    store.require_available()
    return store
