"""
Password hashing for actor credentials.

Uses bcrypt with the configured work factor; verification goes through
bcrypt's own comparison.
"""

import logging

import bcrypt

from core import config

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Hash a plaintext password with a fresh salt."""
    salt = bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """Check a candidate password against a stored hash."""
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Malformed stored hash or over-long candidate
        logger.warning("Password verification failed on malformed input")
        return False
