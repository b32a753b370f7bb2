"""Password helpers for the optional HTTP Basic auth."""

import hmac

import bcrypt


def hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def verify_password(plain: str, hashed: str) -> bool:
    """Verify a password against a bcrypt hash, or a plaintext value from config."""
    if hashed.startswith("$2b$") or hashed.startswith("$2a$"):
        return bcrypt.checkpw(plain.encode(), hashed.encode())
    # Plaintext: constant-time comparison
    return hmac.compare_digest(plain.encode(), hashed.encode())
