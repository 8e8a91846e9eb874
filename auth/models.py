"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and routes do
the work; these classes own the domain shape.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """One credential record.

    hashed_password is the bcrypt digest, never the plaintext. It is None on
    records read through UserStore.list_users(), which projects the column
    away so it cannot leak into a listing response.
    """

    username: str
    email: str
    full_name: str
    id: int | None = None
    hashed_password: str | None = None
    created_at: str | None = None
    is_active: bool = True


@dataclass(frozen=True)
class Identity:
    """Decoded claims of a verified session token.

    Only decode_access_token() builds these, and only after the signature has
    been checked. Attached to request.state.identity by the access gate.
    """

    user_id: int
    username: str
    email: str
    issued_at: int
    expires_at: int
