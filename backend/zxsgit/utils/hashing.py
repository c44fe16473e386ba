"""Hashing utilities for passwords and session tokens."""
import base64
import hashlib
import hmac
import uuid


def hash_password(password: str) -> str:
    """
    Digest a password with unsalted SHA-256, base64 encoded.

    This is the format existing users.json files carry. It is not a slow
    salted hash; upgrading it would invalidate stored credentials.

    Args:
        password: The password to hash

    Returns:
        Base64 SHA-256 digest
    """
    digest = hashlib.sha256(str(password).encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a password against a stored digest.

    Args:
        password: The password to verify
        password_hash: The stored digest

    Returns:
        True if the password matches, False otherwise
    """
    if not password_hash:
        return False
    return hmac.compare_digest(hash_password(password), password_hash)


def generate_token() -> str:
    """Generate an opaque session token."""
    return str(uuid.uuid4())


def generate_id() -> str:
    """Generate a record identifier."""
    return str(uuid.uuid4())
