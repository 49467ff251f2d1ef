from app.utils.security import hash_password, verify_password, create_access_token, decode_access_token
from app.utils.validators import normalize_email, is_http_url, clamp_progress

__all__ = [
    "hash_password", "verify_password", "create_access_token", "decode_access_token",
    "normalize_email", "is_http_url", "clamp_progress",
]
