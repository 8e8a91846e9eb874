"""
auth/store.py -- SQLAlchemy Core persistence layer for credential records.

Pattern: Repository + Data Mapper. UserStore is the repository; _row_to_user
is the mapper. Flow and route code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  username and email each carry a UNIQUE constraint. The registration flow
  looks both up before inserting, but two concurrent registrations can pass
  that check together; the constraint makes the second INSERT raise
  IntegrityError, which the flow reports as a duplicate.

Lifecycle:
  connect()  -- startup probe: create schema, SELECT 1. Returns False instead
                of raising so the server can come up and answer /health.
  ping()     -- re-probe; used by /health. Creates the schema if the startup
                probe never got that far.
  close()    -- dispose the engine pool.

  Every query method first calls require_available(), so a store whose last
  probe failed answers with StorageUnavailableError immediately instead of
  waiting on a dead connection. A query that hits OperationalError marks the
  store unavailable for the same reason.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, Integer, MetaData, String, Table, Text, create_engine, func, inspect, or_, select
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import OperationalError

from auth.errors import StorageUnavailableError
from auth.models import User

logger = logging.getLogger("recordgate.store")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(255), nullable=False, unique=True),
    Column("email", String(320), nullable=False, unique=True),
    Column("full_name", String(255), nullable=False),
    Column("hashed_password", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
    Column("is_active", Boolean, nullable=False, server_default="1"),
)

# Every column except hashed_password. list_users() selects only these.
_PUBLIC_COLUMNS = [c for c in _users.c if c.name != "hashed_password"]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _engine_args(db_url: str, timeout: int) -> dict:
    """create_engine() keyword arguments that bound how long a call can block.

    The connect timeout keyword differs between drivers. SQLite in-memory
    engines use SingletonThreadPool, which rejects pool_timeout.
    """
    if db_url.startswith("sqlite"):
        # sqlite3's timeout is the busy-wait on a locked file; same intent.
        return {"connect_args": {"check_same_thread": False, "timeout": timeout}}
    return {"connect_args": {"connect_timeout": timeout}, "pool_timeout": timeout}


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for credential records.

    Usage:
        store = UserStore("sqlite:///recordgate.db")
        store.connect()
        user_id = store.create_user(User(username="alice", email="a@x.com",
                                          full_name="Alice A", hashed_password=digest))
        user = store.get_by_email("a@x.com")
        store.close()
    """

    def __init__(self, db_url: str, connect_timeout: int = 5) -> None:
        self.engine: Engine = create_engine(db_url, pool_pre_ping=True, **_engine_args(db_url, connect_timeout))
        self.available = False
        self._schema_ready = False

    @property
    def safe_url(self) -> str:
        """The connection URL with any password replaced by ***, for logs."""
        return self.engine.url.render_as_string(hide_password=True)

    @property
    def database_name(self) -> str:
        name = self.engine.url.database or ""
        # SQLite URLs carry a file path; only the file name is meaningful to clients.
        return name.rsplit("/", 1)[-1] if name else "memory"

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def connect(self) -> bool:
        """Create the schema and probe the database. Returns the probe result."""
        logger.info("Connecting to %s", self.safe_url)
        try:
            self._probe()
        except OperationalError as exc:
            logger.error("Database connection error: %s", exc.orig)
            self.available = False
            return False
        self.available = True
        return True

    def ping(self) -> bool:
        """Re-probe the database and record whether it succeeded.

        Creates the schema first if no earlier probe managed to.
        """
        try:
            self._probe()
        except OperationalError as exc:
            if self.available:
                logger.error("Database ping failed: %s", exc.orig)
            self.available = False
            return False
        if not self.available:
            logger.info("Database connection established (%s)", self.database_name)
        self.available = True
        return True

    def _probe(self) -> None:
        if not self._schema_ready:
            _metadata.create_all(self.engine)
            self._schema_ready = True
        with self.engine.connect() as conn:
            conn.execute(select(1))

    def require_available(self) -> None:
        """Raise StorageUnavailableError if the last probe failed."""
        if not self.available:
            raise StorageUnavailableError()

    @contextmanager
    def _connection(self) -> Iterator[Connection]:
        self.require_available()
        try:
            with self.engine.connect() as conn:
                yield conn
        except OperationalError as exc:
            self.available = False
            logger.error("Database operation failed, marking store unavailable: %s", exc.orig)
            raise StorageUnavailableError() from exc

    def close(self) -> None:
        self.engine.dispose()
        self.available = False

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find_by_email_or_username(self, email: str, username: str) -> User | None:
        """Return any record whose email OR username matches. Used before insert."""
        with self._connection() as conn:
            row = conn.execute(
                _users.select().where(or_(_users.c.email == email, _users.c.username == username)).limit(1)
            ).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_email(self, email: str) -> User | None:
        """Look up a record by exact email (case-sensitive). Returns None if not found."""
        with self._connection() as conn:
            row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def list_users(self) -> list[User]:
        """Return all records newest first, without the password column."""
        with self._connection() as conn:
            rows = conn.execute(
                select(*_PUBLIC_COLUMNS).order_by(_users.c.created_at.desc(), _users.c.id.desc())
            ).fetchall()
        return [_row_to_user(r) for r in rows]

    def count_users(self) -> int:
        with self._connection() as conn:
            result = conn.execute(select(func.count()).select_from(_users)).scalar()
        return result or 0

    def table_names(self) -> list[str]:
        """Return the table names in the connected database."""
        with self._connection() as conn:
            return sorted(inspect(conn).get_table_names())

    def create_user(self, user: User) -> int:
        """Insert a new record and return its assigned id.

        created_at is stamped here if the caller left it empty. Raises
        sqlalchemy.exc.IntegrityError if the username or email already exists.
        """
        if user.created_at is None:
            user.created_at = _now_iso()
        with self._connection() as conn:
            result = conn.execute(
                _users.insert().values(
                    username=user.username,
                    email=user.email,
                    full_name=user.full_name,
                    hashed_password=user.hashed_password,
                    created_at=user.created_at,
                    is_active=user.is_active,
                )
            )
            conn.commit()
            user.id = result.inserted_primary_key[0]
        return user.id


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    # Rows from list_users() have no hashed_password column.
    return User(
        id=row.id,
        username=row.username,
        email=row.email,
        full_name=row.full_name,
        hashed_password=getattr(row, "hashed_password", None),
        created_at=row.created_at,
        is_active=bool(row.is_active),
    )
