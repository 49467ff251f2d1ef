"""
Course Model — Catalogue entries with embedded lessons.
"""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, JSON, ForeignKey, Boolean, Float, Text

from sqlalchemy.orm import relationship

from app.database import Base, new_id


class Course(Base):
    __tablename__ = "courses"

    id = Column(String(32), primary_key=True, default=new_id)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Float, nullable=False, default=0.0)   # INR, 0 = free
    category = Column(String(64), nullable=False, index=True)
    instructor_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)
    instructor = relationship("User")

    lessons = Column(JSON, default=list)             # [{title, content, duration, order, video}]
    thumbnail = Column(String(512), default="")

    published = Column(Boolean, default=False, index=True)
    approved = Column(Boolean, default=False, index=True)

    enrolled_students = Column(JSON, default=list)   # user ids
    rating = Column(Float, default=0.0)
    reviews = Column(JSON, default=list)             # [{user, rating, comment, createdAt}]

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
