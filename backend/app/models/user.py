"""
User Model — Students, instructors and admins.
"""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Boolean

from app.database import Base, new_id


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(128), nullable=False)
    email = Column(String(256), unique=True, index=True, nullable=False)
    password_hash = Column(String(128), nullable=False)

    role = Column(String(16), default="student", nullable=False)   # student | instructor | admin
    approved = Column(Boolean, default=False)
    status = Column(String(16), default="pending")                  # active | inactive | pending
    profile_image = Column(String(512), default="")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
