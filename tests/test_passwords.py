"""Unit tests for auth/passwords.py -- bcrypt hashing and verification.

Covers:
- hash/verify round trip, and rejection of a different password
- salting: the same password hashes to different digests
- cost factor embedded in the digest
- malformed digests verify as False instead of raising
"""

from auth.passwords import BCRYPT_ROUNDS, DUMMY_HASH, hash_password, verify_password


def test_verify_accepts_matching_password():
    digest = hash_password("secret1")
    assert verify_password("secret1", digest) is True


def test_verify_rejects_other_password():
    digest = hash_password("secret1")
    assert verify_password("secret2", digest) is False
    assert verify_password("", digest) is False


def test_same_password_hashes_differently():
    """The salt is random per call and lives inside the digest."""
    first = hash_password("secret1")
    second = hash_password("secret1")
    assert first != second
    assert verify_password("secret1", first)
    assert verify_password("secret1", second)


def test_digest_is_not_plaintext_and_carries_cost():
    digest = hash_password("secret1")
    assert "secret1" not in digest
    assert digest.startswith("$2")
    assert digest.split("$")[2] == f"{BCRYPT_ROUNDS:02d}"


def test_malformed_digest_is_a_failed_verification():
    assert verify_password("secret1", "not-a-bcrypt-hash") is False
    assert verify_password("secret1", "") is False
    assert verify_password("secret1", hash_password("secret1")[:20]) is False


def test_dummy_hash_is_a_real_digest():
    assert verify_password("recordgate_timing_dummy", DUMMY_HASH)
    assert not verify_password("secret1", DUMMY_HASH)
