"""Unit tests for auth/tokens.py -- JWT issue and verification.

Covers:
- issue/verify round trip returns the same identity
- default lifetime is 24 hours
- expiry boundary: valid one second before exp, expired at exp
- tampered payload and signature, including the last signature character
  -> InvalidSignatureError
- token signed with another key -> InvalidSignatureError
- garbage input -> MalformedTokenError
- all three are TokenError subclasses with distinct reasons
"""

import string
import time

import pytest
from jose import jwt

from auth.errors import ExpiredTokenError, InvalidSignatureError, MalformedTokenError, TokenError
from auth.tokens import create_access_token, decode_access_token

DAY = 24 * 60 * 60


def _flip_char(segment: str, index: int) -> str:
    replacement = "A" if segment[index] != "A" else "B"
    return segment[:index] + replacement + segment[index + 1 :]


def test_round_trip_returns_claims():
    token = create_access_token(7, "alice", "a@x.com")
    identity = decode_access_token(token)
    assert identity.user_id == 7
    assert identity.username == "alice"
    assert identity.email == "a@x.com"


def test_default_lifetime_is_24_hours():
    issued = 1_700_000_000
    token = create_access_token(1, "alice", "a@x.com", issued_at=issued)
    identity = decode_access_token(token, now=issued + 1)
    assert identity.issued_at == issued
    assert identity.expires_at == issued + DAY


def test_valid_until_just_before_expiry():
    issued = int(time.time())
    token = create_access_token(1, "alice", "a@x.com", issued_at=issued)
    assert decode_access_token(token, now=issued + DAY - 1).user_id == 1


def test_expired_at_exact_expiry():
    issued = int(time.time())
    token = create_access_token(1, "alice", "a@x.com", issued_at=issued)
    with pytest.raises(ExpiredTokenError):
        decode_access_token(token, now=issued + DAY)


def test_token_issued_yesterday_is_expired_now():
    token = create_access_token(1, "alice", "a@x.com", issued_at=time.time() - DAY - 60)
    with pytest.raises(ExpiredTokenError):
        decode_access_token(token)


def test_custom_lifetime():
    issued = int(time.time())
    token = create_access_token(1, "alice", "a@x.com", expire_seconds=60, issued_at=issued)
    assert decode_access_token(token, now=issued + 59).expires_at == issued + 60
    with pytest.raises(ExpiredTokenError):
        decode_access_token(token, now=issued + 60)


def test_tampered_payload_is_rejected():
    header, payload, signature = create_access_token(1, "alice", "a@x.com").split(".")
    tampered = ".".join([header, _flip_char(payload, len(payload) // 2), signature])
    with pytest.raises(InvalidSignatureError):
        decode_access_token(tampered)


def test_tampered_signature_is_rejected():
    header, payload, signature = create_access_token(1, "alice", "a@x.com").split(".")
    tampered = ".".join([header, payload, _flip_char(signature, 5)])
    with pytest.raises(InvalidSignatureError):
        decode_access_token(tampered)


def test_every_other_last_signature_character_is_rejected():
    header, payload, signature = create_access_token(1, "alice", "a@x.com").split(".")
    alphabet = string.ascii_letters + string.digits + "-_"
    for replacement in alphabet.replace(signature[-1], ""):
        tampered = ".".join([header, payload, signature[:-1] + replacement])
        with pytest.raises(InvalidSignatureError):
            decode_access_token(tampered)


def test_swapped_claims_with_original_signature_are_rejected():
    """Claims from one token under another token's signature must not verify."""
    a_header, _, a_sig = create_access_token(1, "alice", "a@x.com").split(".")
    _, b_payload, _ = create_access_token(2, "mallory", "m@x.com").split(".")
    with pytest.raises(InvalidSignatureError):
        decode_access_token(".".join([a_header, b_payload, a_sig]))


def test_foreign_key_is_rejected():
    now = int(time.time())
    forged = jwt.encode(
        {"sub": "1", "username": "alice", "email": "a@x.com", "iat": now, "exp": now + DAY},
        "x" * 64,
        algorithm="HS256",
    )
    with pytest.raises(InvalidSignatureError):
        decode_access_token(forged)


@pytest.mark.parametrize("garbage", ["", "not-a-token", "a.b", "!!!.???.***"])
def test_garbage_is_malformed(garbage):
    with pytest.raises(MalformedTokenError):
        decode_access_token(garbage)


def test_failures_share_a_base_and_differ_in_reason():
    reasons = {MalformedTokenError.reason, InvalidSignatureError.reason, ExpiredTokenError.reason}
    assert len(reasons) == 3
    for cls in (MalformedTokenError, InvalidSignatureError, ExpiredTokenError):
        assert issubclass(cls, TokenError)
