"""
Enrollment Model — Joins a user to a course with progress and payment state.
One row per (user, course); the unique constraint is the source of truth.
"""
from datetime import datetime
from sqlalchemy import (
    Column, String, DateTime, JSON, ForeignKey, Boolean, Float, UniqueConstraint,
)
from sqlalchemy.orm import relationship

from app.database import Base, new_id


class Enrollment(Base):
    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_enrollment_user_course"),
    )

    id = Column(String(32), primary_key=True, default=new_id)
    user_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)
    course_id = Column(String(32), ForeignKey("courses.id"), nullable=False, index=True)

    user = relationship("User")
    course = relationship("Course")

    progress = Column(Float, default=0.0)              # 0-100
    completed_lessons = Column(JSON, default=list)     # [{lessonId, completedAt}]

    # pending | completed | failed | refunded | free
    payment_status = Column(String(16), default="pending", nullable=False)
    payment_id = Column(String(64), default="")        # gateway payment id for paid enrollments
    status = Column(String(16), default="active")

    certificate_issued = Column(Boolean, default=False)
    certificate_url = Column(String(512), default="")

    enrolled_at = Column(DateTime, default=datetime.utcnow)
    last_accessed_at = Column(DateTime, default=datetime.utcnow)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
