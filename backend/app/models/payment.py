"""
Payment Record Model — Tracks Razorpay course purchases.
"""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, JSON, ForeignKey, Float

from sqlalchemy.orm import relationship

from app.database import Base, new_id


class Payment(Base):
    __tablename__ = "payments"

    id = Column(String(32), primary_key=True, default=new_id)
    user_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)
    course_id = Column(String(32), ForeignKey("courses.id"), nullable=False, index=True)

    user = relationship("User")
    course = relationship("Course")

    amount = Column(Float, nullable=False)              # INR (gateway amounts are in paise)

    # Gateway references
    order_id = Column(String(64), unique=True, nullable=False, index=True)
    payment_id = Column(String(64), unique=True, nullable=True)   # NULL until verified
    receipt = Column(String(64), nullable=False)

    # Status tracking
    status = Column(String(16), default="pending", nullable=False)  # pending | completed | failed | refunded
    payment_method = Column(String(16), nullable=False, default="razorpay")
    refund_id = Column(String(64), nullable=True)
    notes = Column(JSON, default=dict)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    completed_at = Column(DateTime, nullable=True)
