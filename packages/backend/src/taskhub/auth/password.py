"""Password hashing utilities.

Learn: Uses bcrypt for one-way password hashing. bcrypt embeds a random
salt in every digest, so hashing the same password twice yields two
different strings that both verify. The cost factor defaults to 8.
"""

import bcrypt

DEFAULT_ROUNDS = 8


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Hash a password with bcrypt.

    Learn: Hashes start with "$2b$<rounds>$". Passwords are truncated
    to 72 bytes (bcrypt's limit).
    """
    pw_bytes = password.encode("utf-8")[:72]
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash.

    A malformed or empty digest is treated as a non-match, never an error.
    bcrypt.checkpw compares in constant time.
    """
    if not password_hash:
        return False
    try:
        pw_bytes = password.encode("utf-8")[:72]
        hash_bytes = password_hash.encode("utf-8")
        return bcrypt.checkpw(pw_bytes, hash_bytes)
    except (ValueError, TypeError):
        return False
