"""
Webinar Registration Routes — Public sign-up form for webinars.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.webinar import WebinarRegistration
from app.routes.webinar import get_webinar_or_404
from app.schemas.schemas import WebinarRegistrationRequest, WebinarRegistrationResponse
from app.services.errors import ServiceError
from app.services.notification_service import NotificationService
from app.services.webinar_service import WebinarService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/webinar-registrations", tags=["Webinar Registrations"])

ALREADY_REGISTERED = "You are already registered for this webinar."


@router.post("/{webinar_id}", response_model=WebinarRegistrationResponse, status_code=201)
def register_guest(
    webinar_id: str,
    payload: WebinarRegistrationRequest,
    db: Session = Depends(get_db),
):
    """Register an attendee by e-mail without an account."""
    webinar = get_webinar_or_404(db, webinar_id)

    existing = db.query(WebinarRegistration).filter(
        WebinarRegistration.webinar_id == webinar.id,
        WebinarRegistration.email == payload.email,
    ).first()
    if existing:
        raise HTTPException(status_code=400, detail=ALREADY_REGISTERED)

    if not WebinarService.is_attending(webinar, payload.email):
        try:
            WebinarService.add_attendee(webinar, payload.email)
        except ServiceError as e:
            raise HTTPException(status_code=e.status_code, detail=e.message)

    registration = WebinarRegistration(
        webinar_id=webinar.id,
        name=payload.name,
        email=payload.email,
        phone=payload.phone,
        institute=payload.institute or "",
        year=payload.year or "",
    )
    db.add(registration)

    try:
        db.flush()
        NotificationService.emit(
            db, None,
            "New Webinar Registration",
            f"{payload.name} ({payload.email}) has registered for {webinar.title}",
            "webinar", webinar.id, "Webinar",
        )
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail=ALREADY_REGISTERED)

    db.refresh(webinar)
    logger.info("webinar %s: registered %s", webinar.id, payload.email)
    return WebinarRegistrationResponse(
        message="Registration successful",
        webinar=WebinarService.to_out(webinar),
    )
