"""
api/routes/v1/auth.py -- Registration, login, and identity endpoints.

Routes:
  POST /api/register  -- create account; 201 with token
  POST /api/login     -- email/password login; 200 with token
  GET  /api/me        -- claims of the presented token (requires auth)

Security:
  register_user() / login_user() own validation, uniqueness, and timing
  equalization. Routes only translate bodies in and results out; errors
  propagate as AuthError and are rendered by api/main.py.
  Cache-Control: no-store on every response that carries a token.

Register and login are sync handlers on purpose: bcrypt is CPU-bound, and
FastAPI runs sync handlers in its thread pool instead of on the event loop.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.models import AuthResponse, IdentityResponse, LoginRequest, PublicUser, RegisterRequest
from auth.dependencies import get_current_identity, get_user_store
from auth.models import Identity
from auth.service import AuthResult, login_user, register_user
from auth.store import UserStore

# Auth policy:
# - POST /api/register: public -- storage pre-flight only (get_user_store)
# - POST /api/login:    public -- storage pre-flight only (get_user_store)
# - GET  /api/me:       requires auth (get_current_identity); never touches storage
router = APIRouter()


def _token_response(result: AuthResult, message: str, status_code: int) -> JSONResponse:
    resp = JSONResponse(
        status_code=status_code,
        content=AuthResponse(
            message=message,
            token=result.token,
            user=PublicUser.from_user(result.user),
        ).model_dump(by_alias=True),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/register", response_model=AuthResponse, status_code=201)
def register(body: RegisterRequest, store: UserStore = Depends(get_user_store)) -> JSONResponse:
    """Create a credential record and return a token for it.

    A second registration with the same email or username answers 409.
    """
    result = register_user(store, body.username, body.email, body.password, body.full_name)
    return _token_response(result, "User registered successfully", 201)


@router.post("/login", response_model=AuthResponse)
def login(body: LoginRequest, store: UserStore = Depends(get_user_store)) -> JSONResponse:
    """Authenticate with email and password; return a token.

    Unknown email and wrong password produce the same 401 body.
    """
    result = login_user(store, body.email, body.password)
    return _token_response(result, "Login successful", 200)


@router.get("/me", response_model=IdentityResponse)
async def me(identity: Identity = Depends(get_current_identity)) -> IdentityResponse:
    """Return the verified claims of the presented token."""
    return IdentityResponse.from_identity(identity)
