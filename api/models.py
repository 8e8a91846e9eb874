"""
API request and response models for RecordGate REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py, which
own the internal domain representation. Route handlers map between the two.

Wire format is camelCase (fullName, createdAt) to match the browser client;
Python attribute names stay snake_case via the alias generator.

None of the user models has a password field. A credential record can only
reach a response through PublicUser.from_user(), which has nowhere to put
the hash.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from auth.models import Identity, User

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/register.

    Fields are Optional so a missing field reaches the registration flow and
    gets the flow's "All fields are required" error rather than a schema dump.
    """

    model_config = _CAMEL

    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    full_name: Optional[str] = None


class LoginRequest(BaseModel):
    """Request body for POST /api/login."""

    email: Optional[str] = None
    password: Optional[str] = None


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class PublicUser(BaseModel):
    """A credential record with the password hash stripped."""

    model_config = _CAMEL

    id: int
    username: str
    email: str
    full_name: str
    created_at: str

    @classmethod
    def from_user(cls, user: User) -> "PublicUser":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            full_name=user.full_name,
            created_at=user.created_at or "",
        )


class UserListItem(PublicUser):
    is_active: bool

    @classmethod
    def from_user(cls, user: User) -> "UserListItem":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            full_name=user.full_name,
            created_at=user.created_at or "",
            is_active=user.is_active,
        )


class AuthResponse(BaseModel):
    """Response for POST /api/register and POST /api/login."""

    model_config = _CAMEL

    message: str
    token: str
    user: PublicUser


class UserListResponse(BaseModel):
    """Response for GET /api/users."""

    model_config = _CAMEL

    users: list[UserListItem]
    total: int
    message: str


class CollectionInfo(BaseModel):
    name: str
    type: str = "table"


class StatsResponse(BaseModel):
    """Response for GET /api/stats."""

    model_config = _CAMEL

    total_users: int
    total_collections: int
    collections: list[CollectionInfo]
    database_name: str


class IdentityResponse(BaseModel):
    """Response for GET /api/me -- the verified claims, straight from the token."""

    model_config = _CAMEL

    id: int
    username: str
    email: str
    issued_at: int
    expires_at: int

    @classmethod
    def from_identity(cls, identity: Identity) -> "IdentityResponse":
        return cls(
            id=identity.user_id,
            username=identity.username,
            email=identity.email,
            issued_at=identity.issued_at,
            expires_at=identity.expires_at,
        )


class ErrorResponse(BaseModel):
    """Error body returned on 4xx/5xx responses.

    error is the human-readable message the browser client displays as is;
    code is the stable machine-readable kind.
    """

    model_config = ConfigDict(frozen=True)

    error: str
    code: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    message: str
    database: str
    timestamp: str
