"""
Security Utilities — bcrypt password hashing and JWT access tokens.
"""
import secrets
from datetime import datetime, timedelta
from typing import Dict, Optional

import bcrypt
import jwt

from app.config import get_settings

settings = get_settings()

# Used only when JWT_SECRET is unset; tokens then die with the process
_EPHEMERAL_KEY = secrets.token_urlsafe(32)


def signing_key() -> str:
    return settings.JWT_SECRET or _EPHEMERAL_KEY


def hash_password(password: str) -> str:
    """Hash a plaintext password with a fresh bcrypt salt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plaintext password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed token carrying the user id."""
    expire = datetime.utcnow() + (expires_delta or timedelta(days=settings.JWT_EXPIRE_DAYS))
    return jwt.encode(
        {"id": user_id, "exp": expire},
        signing_key(),
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_access_token(token: str) -> Optional[Dict]:
    """Decode and verify a token. Returns None when invalid or expired."""
    try:
        return jwt.decode(token, signing_key(), algorithms=[settings.JWT_ALGORITHM])
    except jwt.PyJWTError:
        return None
