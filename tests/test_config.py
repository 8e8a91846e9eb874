"""Unit tests for core/config.py -- SECRET_KEY startup policy.

Settings are built with explicit keyword arguments and no .env file so the
DEBUG=true set by conftest.py does not leak into these cases.
"""

import pytest
from pydantic import ValidationError

from core.config import Settings


def _settings(**kwargs) -> Settings:
    return Settings(_env_file=None, **kwargs)


def test_missing_secret_in_production_refuses_to_start():
    with pytest.raises(ValidationError, match="SECRET_KEY is required"):
        _settings(debug=False, secret_key="")


def test_short_secret_is_rejected():
    with pytest.raises(ValidationError, match="at least 32 characters"):
        _settings(debug=False, secret_key="too-short")


def test_debug_generates_a_random_secret():
    first = _settings(debug=True, secret_key="")
    second = _settings(debug=True, secret_key="")
    assert len(first.secret_key) >= 32
    assert first.secret_key != second.secret_key


def test_explicit_secret_and_defaults():
    s = _settings(debug=False, secret_key="k" * 40)
    assert s.secret_key == "k" * 40
    assert s.token_expire_seconds == 24 * 60 * 60
    assert s.password_min_length == 6
    assert s.port == 5001


def test_non_positive_token_lifetime_is_rejected():
    with pytest.raises(ValidationError):
        _settings(debug=False, secret_key="k" * 40, token_expire_seconds=0)
