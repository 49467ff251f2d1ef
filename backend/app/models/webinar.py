"""
Webinar Models — Live sessions and their public registrations.
"""
from datetime import datetime
from sqlalchemy import (
    Column, String, Integer, DateTime, JSON, ForeignKey, Float, Text, UniqueConstraint,
)
from sqlalchemy.orm import relationship

from app.database import Base, new_id


class Webinar(Base):
    __tablename__ = "webinars"

    id = Column(String(32), primary_key=True, default=new_id)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    long_description = Column(Text, default="")

    # Either a registered user or a free-form custom speaker
    speaker_id = Column(String(32), ForeignKey("users.id"), nullable=True, index=True)
    speaker = relationship("User")
    speaker_name = Column(String(128), default="")
    speaker_image = Column(String(512), default="")
    speaker_role = Column(String(128), default="")
    speaker_company = Column(String(128), default="")
    speaker_bio = Column(Text, default="")
    speaker_experience = Column(String(128), default="")
    speaker_expertise = Column(JSON, default=list)

    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=True)
    duration = Column(Integer, nullable=False)      # minutes, 15-480
    link = Column(String(512), nullable=False)
    recording_url = Column(String(512), default="")
    price = Column(Float, default=0.0)

    status = Column(String(16), default="scheduled", index=True)  # scheduled | live | completed | cancelled
    max_attendees = Column(Integer, default=100)
    attendees = Column(JSON, default=list)          # [{email, paid}]

    language = Column(String(32), default="English")
    level = Column(String(32), default="Intermediate")
    learning_outcomes = Column(JSON, default=list)
    prerequisites = Column(JSON, default=list)
    agenda = Column(JSON, default=list)             # [{time, topic, description}]
    resources = Column(JSON, default=list)          # [{name, type, url}]

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class WebinarRegistration(Base):
    """Public (no account) sign-up for a webinar, one per e-mail address."""
    __tablename__ = "webinar_registrations"
    __table_args__ = (
        UniqueConstraint("webinar_id", "email", name="uq_registration_webinar_email"),
    )

    id = Column(String(32), primary_key=True, default=new_id)
    webinar_id = Column(String(32), ForeignKey("webinars.id"), nullable=False, index=True)

    name = Column(String(128), nullable=False)
    email = Column(String(256), nullable=False)
    phone = Column(String(32), nullable=False)
    institute = Column(String(256), default="")
    year = Column(String(16), default="")

    registered_at = Column(DateTime, default=datetime.utcnow)
