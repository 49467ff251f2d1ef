"""
Webinar Routes — Scheduling, listing and attendee registration.

Webinars hosted by a registered user can be managed by that user or an
admin; webinars with a free-form guest speaker are admin-managed.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.models.webinar import Webinar
from app.schemas.schemas import (
    WebinarRequest, WebinarStatusRequest, WebinarOut, IsRegisteredResponse, MessageResponse,
)
from app.services.errors import ServiceError
from app.services.notification_service import NotificationService
from app.services.webinar_service import WebinarService
from app.utils.auth import get_current_user, require_instructor

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/webinars", tags=["Webinars"])


def get_webinar_or_404(db: Session, webinar_id: str) -> Webinar:
    webinar = db.query(Webinar).filter(Webinar.id == webinar_id).first()
    if not webinar:
        raise HTTPException(status_code=404, detail="Webinar not found")
    return webinar


def _check_can_manage(user: User, webinar: Webinar, action: str) -> None:
    if user.role == "admin":
        return
    if webinar.speaker_id is None or webinar.speaker_id != user.id:
        raise HTTPException(status_code=403, detail=f"Not authorized to {action} this webinar")


def _apply_payload(db: Session, webinar: Webinar, payload: WebinarRequest, speaker: Optional[str]) -> None:
    webinar.title = payload.title
    webinar.description = payload.description
    webinar.start_time = payload.start_time
    webinar.duration = payload.duration
    webinar.end_time = payload.end_time or WebinarService.default_end_time(payload.start_time, payload.duration)
    webinar.link = payload.link

    if payload.price is not None:
        webinar.price = payload.price
    elif webinar.price is None:
        webinar.price = 0.0

    optional = {
        "long_description": payload.long_description,
        "max_attendees": payload.max_attendees,
        "recording_url": payload.recording_url,
        "language": payload.language,
        "level": payload.level,
        "learning_outcomes": payload.learning_outcomes,
        "prerequisites": payload.prerequisites,
        "speaker_image": payload.speaker_image,
        "speaker_role": payload.speaker_role,
        "speaker_company": payload.speaker_company,
        "speaker_bio": payload.speaker_bio,
        "speaker_experience": payload.speaker_experience,
        "speaker_expertise": payload.speaker_expertise,
    }
    for key, value in optional.items():
        if value is not None:
            setattr(webinar, key, value)

    if payload.agenda is not None:
        webinar.agenda = [item.model_dump() for item in payload.agenda]
    if payload.resources is not None:
        webinar.resources = [item.model_dump() for item in payload.resources]

    WebinarService.apply_speaker(db, webinar, speaker, payload.speaker_image)


@router.get("", response_model=list[WebinarOut])
def list_webinars(
    status: Optional[str] = None,
    search: Optional[str] = None,
    speaker: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """All webinars, soonest first."""
    query = db.query(Webinar)
    if status:
        query = query.filter(Webinar.status == status)
    if speaker:
        query = query.filter(Webinar.speaker_id == speaker)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Webinar.title.ilike(pattern), Webinar.description.ilike(pattern)))

    return [WebinarService.to_out(w) for w in query.order_by(Webinar.start_time.asc()).all()]


@router.get("/{webinar_id}", response_model=WebinarOut)
def get_webinar(webinar_id: str, db: Session = Depends(get_db)):
    return WebinarService.to_out(get_webinar_or_404(db, webinar_id))


@router.get("/{webinar_id}/is-registered", response_model=IsRegisteredResponse)
def is_registered(
    webinar_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    webinar = get_webinar_or_404(db, webinar_id)
    return IsRegisteredResponse(registered=WebinarService.is_attending(webinar, user.email))


@router.post("", response_model=WebinarOut, status_code=201)
def create_webinar(
    payload: WebinarRequest,
    user: User = Depends(require_instructor),
    db: Session = Depends(get_db),
):
    """Schedule a webinar. Without an explicit speaker the caller hosts it."""
    webinar = Webinar()
    _apply_payload(db, webinar, payload, payload.speaker or user.id)
    db.add(webinar)
    db.commit()
    db.refresh(webinar)

    logger.info("webinar scheduled: %s at %s", webinar.id, webinar.start_time)
    return WebinarService.to_out(webinar)


@router.put("/{webinar_id}", response_model=WebinarOut)
def update_webinar(
    webinar_id: str,
    payload: WebinarRequest,
    user: User = Depends(require_instructor),
    db: Session = Depends(get_db),
):
    webinar = get_webinar_or_404(db, webinar_id)
    _check_can_manage(user, webinar, "update")

    _apply_payload(db, webinar, payload, payload.speaker)
    db.commit()
    db.refresh(webinar)
    return WebinarService.to_out(webinar)


@router.delete("/{webinar_id}", response_model=MessageResponse)
def delete_webinar(
    webinar_id: str,
    user: User = Depends(require_instructor),
    db: Session = Depends(get_db),
):
    webinar = get_webinar_or_404(db, webinar_id)
    _check_can_manage(user, webinar, "delete")

    db.delete(webinar)
    db.commit()
    return MessageResponse(message="Webinar removed")


@router.patch("/register/{webinar_id}", response_model=WebinarOut)
def register_for_webinar(
    webinar_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Reserve a seat for the signed-in user."""
    webinar = get_webinar_or_404(db, webinar_id)
    try:
        WebinarService.add_attendee(webinar, user.email)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    NotificationService.emit(
        db, user.id,
        "New Webinar Registration",
        f"{user.name} has registered for {webinar.title}",
        "webinar", webinar.id, "Webinar",
    )
    db.commit()
    db.refresh(webinar)
    return WebinarService.to_out(webinar)


@router.patch("/{webinar_id}/status", response_model=WebinarOut)
def update_webinar_status(
    webinar_id: str,
    payload: WebinarStatusRequest,
    user: User = Depends(require_instructor),
    db: Session = Depends(get_db),
):
    webinar = get_webinar_or_404(db, webinar_id)
    _check_can_manage(user, webinar, "update")

    webinar.status = payload.status
    db.commit()
    db.refresh(webinar)
    return WebinarService.to_out(webinar)
