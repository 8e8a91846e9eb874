"""
core/config.py -- RecordGate settings, read from the environment and .env.

Every environment lookup in the project goes through get_settings(); modules
never touch os.environ themselves. get_settings() is lru_cache'd, so the
Settings object is built exactly once per process and importing a module that
calls it at load time (auth/tokens.py, api/main.py) is where a bad
configuration stops the process.

Field names map to upper-case env vars: secret_key -> SECRET_KEY,
database_url -> DATABASE_URL, token_expire_seconds -> TOKEN_EXPIRE_SECONDS.

SECRET_KEY policy (validate_secret_key):
  - no hard-coded fallback. A literal default in the source tree would let
    anyone who reads the repo mint valid tokens.
  - missing key outside DEBUG -> ValueError at startup.
  - missing key with DEBUG=true -> random per-process key plus a warning.
  - keys under 32 characters are rejected in both modes.

Layer rule: core/ may not import from api/ or auth/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("recordgate.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'recordgate.db'}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields except secret_key have usable defaults so Settings() can be
    instantiated in test environments without a real .env file (tests set
    DEBUG=true so a throwaway key is generated).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    # Empty string is the sentinel for "not configured". The model_validator
    # below either generates a dev key or raises, so callers never see "".
    secret_key: str = ""

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    database_url: str = _DEFAULT_DB_URL
    # Bounds the startup probe and every pool checkout, in seconds.
    db_connect_timeout: int = 5

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    token_expire_seconds: int = 24 * 60 * 60
    password_min_length: int = 6

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    cors_origins: list[str] = ["http://localhost:3000"]
    host: str = "0.0.0.0"  # nosec B104
    port: int = 5001

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Apply the SECRET_KEY policy described in the module docstring."""
        if not self.secret_key:
            if self.debug:
                self.secret_key = secrets.token_hex(32)
                logger.warning("WARNING: Using auto-generated SECRET_KEY. Tokens will not persist across restarts.")
            else:
                raise ValueError(
                    "SECRET_KEY is required in production mode. "
                    "Set SECRET_KEY in your environment or .env file. "
                    "To run in development mode, set DEBUG=true."
                )
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        if self.token_expire_seconds <= 0:
            raise ValueError("TOKEN_EXPIRE_SECONDS must be positive.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
