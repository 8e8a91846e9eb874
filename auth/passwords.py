"""
auth/passwords.py -- bcrypt password hashing.

Using bcrypt directly rather than passlib[bcrypt] because passlib's internal
wrap-bug detection creates a password longer than 72 bytes, which bcrypt 4.x
rejects with an explicit error.

Cost factor is fixed at 10 rounds. The salt is generated per call and stored
inside the digest, so hashing the same password twice gives two different
strings and verify_password() needs nothing but the digest.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import bcrypt

BCRYPT_ROUNDS = 10

# bcrypt only reads the first 72 bytes of its input. Current releases raise
# ValueError for anything longer instead of truncating silently.
MAX_PASSWORD_BYTES = 72


def hash_password(plain: str) -> str:
    """Return a salted bcrypt digest of the given plaintext password."""
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt digest.

    bcrypt.checkpw compares in constant time. A malformed or truncated digest
    makes checkpw raise ValueError; that is a failed verification, not a crash.
    """
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


# Timing equalization dummy hash.
# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones. The login flow verifies against this digest
# when the email is unknown so both failure paths pay the same bcrypt cost.
DUMMY_HASH: str = hash_password("recordgate_timing_dummy")
