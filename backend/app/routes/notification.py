"""
Notification Routes — Admin activity feed (polling).
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.notification import Notification
from app.schemas.schemas import NotificationOut, UnreadCountResponse, MessageResponse
from app.utils.auth import require_admin

router = APIRouter(
    prefix="/api/notifications",
    tags=["Notifications"],
    dependencies=[Depends(require_admin)],
)

FEED_LIMIT = 50


@router.get("", response_model=list[NotificationOut])
def get_notifications(db: Session = Depends(get_db)):
    """Latest notifications, newest first."""
    return db.query(Notification).order_by(
        Notification.created_at.desc()
    ).limit(FEED_LIMIT).all()


@router.get("/unread-count", response_model=UnreadCountResponse)
def get_unread_count(db: Session = Depends(get_db)):
    count = db.query(func.count(Notification.id)).filter(
        Notification.is_read.is_(False)
    ).scalar() or 0
    return UnreadCountResponse(count=count)


@router.put("/mark-all-read", response_model=MessageResponse)
def mark_all_read(db: Session = Depends(get_db)):
    db.query(Notification).filter(
        Notification.is_read.is_(False)
    ).update({Notification.is_read: True}, synchronize_session=False)
    db.commit()
    return MessageResponse(message="All notifications marked as read")


@router.put("/{notification_id}/read", response_model=NotificationOut)
def mark_read(notification_id: str, db: Session = Depends(get_db)):
    notification = db.query(Notification).filter(Notification.id == notification_id).first()
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")

    notification.is_read = True
    db.commit()
    db.refresh(notification)
    return notification
