"""
Password hashing with bcrypt.
"""

import bcrypt

from shared.config.logging import get_logger

logger = get_logger(__name__)

BCRYPT_ROUNDS = 12
_BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash a password; the result embeds salt and cost."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a password against a stored bcrypt hash. Non-bcrypt hashes never match."""
    if not hashed_password or not hashed_password.startswith(_BCRYPT_PREFIXES):
        logger.warning("Stored password is not a bcrypt hash")
        return False
    return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
