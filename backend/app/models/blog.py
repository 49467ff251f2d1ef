"""
Blog Model — Posts with embedded likes and comments.
"""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, JSON, ForeignKey, Boolean, Text

from sqlalchemy.orm import relationship

from app.database import Base, new_id


class Blog(Base):
    __tablename__ = "blogs"

    id = Column(String(32), primary_key=True, default=new_id)
    title = Column(String(100), nullable=False)
    content = Column(Text, nullable=False)
    author_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)
    author = relationship("User")

    tags = Column(JSON, default=list)
    published = Column(Boolean, default=False, index=True)
    thumbnail = Column(String(512), default="")

    likes = Column(JSON, default=list)      # user ids
    comments = Column(JSON, default=list)   # [{_id, user, content, createdAt}]

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
