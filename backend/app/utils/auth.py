"""
Auth Gate — FastAPI dependencies that resolve the bearer token to a user
and enforce role checks.
"""
from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.utils.security import decode_access_token


def get_current_user(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> User:
    """Resolve `Authorization: Bearer <token>` to the stored user."""
    if not authorization or not authorization.startswith("Bearer"):
        raise HTTPException(status_code=401, detail="Not authorized, no token")

    parts = authorization.split(" ", 1)
    token = parts[1].strip() if len(parts) == 2 else ""
    if not token:
        raise HTTPException(status_code=401, detail="Not authorized, no token")

    payload = decode_access_token(token)
    if not payload or not payload.get("id"):
        raise HTTPException(status_code=401, detail="Not authorized, token failed")

    user = db.query(User).filter(User.id == payload["id"]).first()
    if not user:
        raise HTTPException(status_code=401, detail="Not authorized, token failed")

    # Account state is re-checked on every request
    if not user.approved:
        raise HTTPException(status_code=401, detail="Not authorized, account pending approval")
    if user.status != "active":
        raise HTTPException(status_code=401, detail="Not authorized, account not active")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != "admin":
        raise HTTPException(status_code=403, detail="Requires admin privileges")
    return user


def require_instructor(user: User = Depends(get_current_user)) -> User:
    """Instructors and admins."""
    if user.role not in ("instructor", "admin"):
        raise HTTPException(status_code=403, detail="Requires instructor privileges")
    return user


def is_owner_or_admin(user: User, owner_id: Optional[str]) -> bool:
    return user.role == "admin" or (owner_id is not None and owner_id == user.id)
