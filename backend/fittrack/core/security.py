"""Security utilities for authentication.

Passwords are hashed with bcrypt. API keys are hashed with unsalted SHA-256:
keys are 32 random bytes, so there is nothing for a dictionary or rainbow
table to exploit, and the digest must be deterministic to be looked up by
equality. Never shorten keys or let users pick them without switching to a
salted, slow hash.
"""

import hashlib
import secrets

import bcrypt

API_KEY_BYTES = 32
API_KEY_MIN_LENGTH = 32


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a hashed password.

    Args:
        plain_password: Plain text password.
        hashed_password: Hashed password to compare against.

    Returns:
        True if password matches, False otherwise.
    """
    return bcrypt.checkpw(
        plain_password.encode("utf-8"),
        hashed_password.encode("utf-8")
    )


def get_password_hash(password: str) -> str:
    """Hash a password.

    Args:
        password: Plain text password.

    Returns:
        Hashed password.
    """
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def generate_api_key() -> str:
    """Generate a new API key.

    Returns:
        64 lowercase hex characters (256 bits from the OS CSPRNG).
    """
    return secrets.token_hex(API_KEY_BYTES)


def hash_api_key(api_key: str) -> str:
    """Hash an API key with SHA-256.

    Args:
        api_key: Plaintext API key.

    Returns:
        64-character lowercase hex digest.
    """
    return hashlib.sha256(api_key.encode("utf-8")).hexdigest()
