"""
Notification Model — Rows written on state transitions, polled by admins.
"""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, Boolean, Text

from sqlalchemy.orm import relationship

from app.database import Base, new_id


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(32), primary_key=True, default=new_id)
    user_id = Column(String(32), ForeignKey("users.id"), nullable=True, index=True)  # actor
    user = relationship("User")

    title = Column(String(128), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(16), nullable=False)       # enrollment | webinar | course | payment | other
    is_read = Column(Boolean, default=False, index=True)

    related_id = Column(String(32), nullable=True)
    on_model = Column(String(16), nullable=True)    # Course | Webinar | Enrollment | Payment | Contact

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
