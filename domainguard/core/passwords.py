"""Password Hashing - bcrypt hashes for user credentials.

Invariants:
    - Plain passwords are never stored; only bcrypt hashes leave this module
    - verify_password never raises on a malformed hash, it answers False
    - bcrypt only reads the first 72 bytes: longer passwords are refused, never
      truncated
"""

import re

import bcrypt

# $2a$ / $2b$ / $2y$, two-digit cost, 53 chars of salt+digest
_BCRYPT_HASH = re.compile(r"^\$2[aby]\$\d{2}\$[./A-Za-z0-9]{53}$")

MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: int = 12) -> str:
    if not fits_bcrypt(password):
        raise ValueError(f"password cannot be longer than {MAX_PASSWORD_BYTES} bytes")
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    if not is_password_hash(password_hash):
        return False
    if not fits_bcrypt(password):
        return False
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


def fits_bcrypt(password: str) -> bool:
    return len(password.encode("utf-8")) <= MAX_PASSWORD_BYTES


def is_password_hash(value: object) -> bool:
    return isinstance(value, str) and bool(_BCRYPT_HASH.match(value))
