"""
api/routes/v1/users.py -- Read-only endpoints over the credential records.

Routes:
  GET /api/users  -- all accounts, newest first, without password hashes
  GET /api/stats  -- record count and table listing

Both require a valid bearer token. The gate runs before the storage
pre-flight, so a request with a bad token gets 401 even while the database
is down.
"""

from fastapi import APIRouter, Depends

from api.models import CollectionInfo, StatsResponse, UserListItem, UserListResponse
from auth.dependencies import get_current_identity, get_user_store
from auth.store import UserStore

# Auth policy:
# - GET /api/users: requires auth -- account listing is internal data
# - GET /api/stats: requires auth -- same data, aggregated
# Router-level dependency enforces auth; the handlers do not repeat it.
router = APIRouter(dependencies=[Depends(get_current_identity)])


@router.get("/users", response_model=UserListResponse)
def list_users(store: UserStore = Depends(get_user_store)) -> UserListResponse:
    """Return every account, newest first. The password column is never selected."""
    users = [UserListItem.from_user(u) for u in store.list_users()]
    return UserListResponse(
        users=users,
        total=len(users),
        message=f"Retrieved {len(users)} users",
    )


@router.get("/stats", response_model=StatsResponse)
def get_stats(store: UserStore = Depends(get_user_store)) -> StatsResponse:
    """Return the account count and the tables present in the database."""
    tables = store.table_names()
    return StatsResponse(
        total_users=store.count_users(),
        total_collections=len(tables),
        collections=[CollectionInfo(name=t) for t in tables],
        database_name=store.database_name,
    )
