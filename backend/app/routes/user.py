"""
User Routes — Registration, login and profile management.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.schemas import (
    RegisterRequest, LoginRequest, ProfileUpdateRequest,
    UserOut, AuthResponse, MessageResponse,
)
from app.utils.auth import get_current_user
from app.utils.security import hash_password, verify_password, create_access_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])


def _auth_response(user: User) -> AuthResponse:
    can_sign_in = user.approved and user.status == "active"
    return AuthResponse(
        **UserOut.model_validate(user).model_dump(),
        token=create_access_token(user.id) if can_sign_in else None,
    )


@router.get("/instructors", response_model=list[UserOut])
def list_instructors(db: Session = Depends(get_db)):
    """Approved, active instructors (public)."""
    return db.query(User).filter(
        User.role == "instructor",
        User.approved.is_(True),
        User.status == "active",
    ).order_by(User.name.asc()).all()


@router.post("/register", response_model=AuthResponse, status_code=201)
def register_user(payload: RegisterRequest, db: Session = Depends(get_db)):
    """Create an account. Students are active immediately; other roles await approval."""
    if db.query(User).filter(User.email == payload.email).first():
        raise HTTPException(status_code=400, detail="User already exists")

    is_student = payload.role == "student"
    user = User(
        name=payload.name,
        email=payload.email,
        password_hash=hash_password(payload.password),
        role=payload.role,
        approved=is_student,
        status="active" if is_student else "pending",
        profile_image=payload.profile_image or "",
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("user registered: %s (%s)", user.id, user.role)
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
def login_user(payload: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == payload.email).first()
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not user.approved:
        raise HTTPException(status_code=401, detail="Your account is pending approval")

    if user.status != "active":
        raise HTTPException(status_code=401, detail="Your account is not active")

    return _auth_response(user)


@router.post("/logout", response_model=MessageResponse)
def logout_user(user: User = Depends(get_current_user)):
    """Tokens are stateless; the client discards its copy."""
    return MessageResponse(message="Logged out successfully")


@router.get("/profile", response_model=UserOut)
def get_profile(user: User = Depends(get_current_user)):
    return user


@router.put("/profile", response_model=AuthResponse)
def update_profile(
    payload: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update name, e-mail, password or profile image and issue a fresh token."""
    if payload.email and payload.email != user.email:
        if db.query(User).filter(User.email == payload.email).first():
            raise HTTPException(status_code=400, detail="Email already in use")
        user.email = payload.email

    if payload.name:
        user.name = payload.name
    if payload.password:
        user.password_hash = hash_password(payload.password)
    if payload.profile_image is not None:
        user.profile_image = payload.profile_image

    db.commit()
    db.refresh(user)
    return _auth_response(user)
